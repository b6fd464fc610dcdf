"""JLPT N2 quiz trainer backend."""
