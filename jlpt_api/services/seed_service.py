"""Static catalog data: the nine question types and a small demo catalog."""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session as DBSession

from jlpt_api.errors import ConflictError
from jlpt_api.models.db.catalog import Answer, Chapter, Question, QuestionType, ReadingPassage
from jlpt_api.models.db.session import SessionQuestion, TrainingSession
from jlpt_api.services.import_service import import_items

logger = logging.getLogger(__name__)

# (id, name, name_ja, description)
QUESTION_TYPES: list[tuple[int, str, str, str]] = [
    (1, "mondai1", "問題1 - 漢字読み", "Kanji reading: choose the reading of the underlined word"),
    (2, "mondai2", "問題2 - 漢字書き", "Kanji writing: choose the kanji for the word in hiragana"),
    (3, "mondai3", "問題3 - 語形成", "Word formation: choose the element that forms the word"),
    (4, "mondai4", "問題4 - 文脈規定", "Context: choose the word that fills the blank"),
    (5, "mondai5", "問題5 - 言い換え", "Paraphrase: choose the word closest in meaning"),
    (6, "mondai6", "問題6 - 用法", "Usage: choose the sentence that uses the word correctly"),
    (7, "mondai7", "問題7 - 文法", "Grammar: choose the correct grammatical form"),
    (8, "mondai8", "問題8 - 文の組み立て", "Sentence building: put the parts in order (★)"),
    (9, "mondai9", "問題9 - 読解", "Reading: read the passage and answer the questions"),
]

SAMPLE_CHAPTERS = ["Chapter 1", "Chapter 2", "Chapter 3"]

SAMPLE_ITEMS: list[dict[str, object]] = [
    {
        "chapter": "Chapter 1",
        "type": 1,
        "content": "ロボットは、工場はもちろん国際宇宙ステーションまで、<u>至る所</u>で使われている。",
        "explanation": "「至る所」は「いたるところ」と読みます。",
        "answers": [
            {"content": "いわゆる", "isCorrect": False},
            {"content": "あらゆる", "isCorrect": False},
            {"content": "いたる", "isCorrect": True},
            {"content": "とおる", "isCorrect": False},
        ],
    },
    {
        "chapter": "Chapter 1",
        "type": 1,
        "content": "10日前までに予約をすると、早期<u>割引</u>で宿泊料金が安くなる。",
        "explanation": "「割引」は「わりびき」と読みます。",
        "answers": [
            {"content": "わりひき", "isCorrect": False},
            {"content": "わりびき", "isCorrect": True},
            {"content": "かつひき", "isCorrect": False},
            {"content": "かつびき", "isCorrect": False},
        ],
    },
    {
        "chapter": "Chapter 1",
        "type": 7,
        "content": "景気が悪くなる（　　）、新聞の広告が減ってくる。",
        "explanation": "「に反して」は逆接、「に関して」は関連、「に応じて」は対応、「にしたがって」は変化の推移を表します。",
        "answers": [
            {"content": "に反して", "isCorrect": False},
            {"content": "に関して", "isCorrect": False},
            {"content": "に応じて", "isCorrect": False},
            {"content": "にしたがって", "isCorrect": True},
        ],
    },
    {
        "chapter": "Chapter 1",
        "type": 7,
        "content": "このレストランは安い（　　）おいしいので、いつも客でいっぱいだ。",
        "explanation": "「わりに」は予想に反して、「かわりに」は代替を表します。",
        "answers": [
            {"content": "わりに", "isCorrect": True},
            {"content": "かわりに", "isCorrect": False},
            {"content": "ついでに", "isCorrect": False},
            {"content": "ゆえに", "isCorrect": False},
        ],
    },
    {
        "chapter": "Chapter 1",
        "passageTitle": "緊急地震速報について",
        "passageContent": (
            "地震のない国から日本に来た人が驚くことの1つに、テレビやラジオの緊急地震速報があります。"
            "番組の途中で突然チャイムが鳴り、「〇〇地方で地震です」とアナウンスが流れます。\n\n"
            "これは1995年の阪神・淡路大震災を契機に地震計が日本各地に置かれ始め、"
            "そのデータをもとに地震の情報を少しでも早く（ 50 ）、研究が始まったものです。"
            "2007年から一般人向けに放送されるようになりました。世界でも初めてのシステムです。"
        ),
        "questions": [
            {
                "type": 9,
                "order": 1,
                "content": "（ 50 ）に入る最もよいものはどれですか。",
                "answers": [
                    {"content": "伝えまいと", "isCorrect": False},
                    {"content": "伝えようと", "isCorrect": True},
                    {"content": "伝えないと", "isCorrect": False},
                    {"content": "伝えるなら", "isCorrect": False},
                ],
            },
        ],
    },
]


def seed_question_types(db: DBSession) -> int:
    """Insert missing question types; existing rows are left untouched."""
    existing = set(db.execute(select(QuestionType.id)).scalars().all())
    added = 0
    for type_id, name, name_ja, description in QUESTION_TYPES:
        if type_id in existing:
            continue
        db.add(
            QuestionType(id=type_id, name=name, name_ja=name_ja, description=description)
        )
        added += 1
    if added:
        db.commit()
        logger.info(f"Seeded {added} question types")
    return added


def clear_catalog(db: DBSession) -> None:
    """Remove all sessions and catalog content except question types."""
    db.execute(delete(SessionQuestion))
    db.execute(delete(TrainingSession))
    db.execute(delete(Answer))
    db.execute(delete(Question))
    db.execute(delete(ReadingPassage))
    db.execute(delete(Chapter))
    db.commit()
    logger.info("Cleared catalog and sessions")


def seed_sample_data(db: DBSession, force: bool = False) -> int:
    """
    Load the demo catalog. Refuses to touch a non-empty catalog unless
    ``force`` is set, in which case everything is cleared first.
    """
    chapter_count = db.execute(select(func.count(Chapter.id))).scalar() or 0
    if chapter_count and not force:
        raise ConflictError("Catalog is not empty, use force to reseed")
    if force:
        clear_catalog(db)

    seed_question_types(db)
    for order_num, name in enumerate(SAMPLE_CHAPTERS, start=1):
        db.add(Chapter(name=name, order_num=order_num))
    db.commit()

    imported = import_items(db, SAMPLE_ITEMS)
    logger.info(f"Seeded {len(SAMPLE_CHAPTERS)} chapters and {imported} sample questions")
    return imported
