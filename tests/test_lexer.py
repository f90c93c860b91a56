from lexer import LF, SPACE, TAB, Lexer


def tokenize(text):
    return list(Lexer(text))


def types(tokens):
    return [t.type for t in tokens]


def test_three_symbols():
    tokens = tokenize(" \t\n")
    assert types(tokens) == [SPACE, TAB, LF]
    assert [t.line for t in tokens] == [1, 1, 1]


def test_comments_are_skipped_without_counting_lines():
    tokens = tokenize("push a \tb\r\nc x ")
    assert types(tokens) == [SPACE, SPACE, TAB, LF, SPACE, SPACE]
    assert [t.line for t in tokens] == [1, 1, 1, 1, 2, 2]


def test_line_tracks_next_token():
    lexer = Lexer("\n\n ")
    assert lexer.line == 1
    lexer.get_next_token()
    assert lexer.line == 2
    lexer.get_next_token()
    assert lexer.line == 3
    tok = lexer.get_next_token()
    assert tok.type == SPACE
    assert tok.line == 3


def test_exhaustion_returns_none():
    lexer = Lexer("abc ")
    assert lexer.get_next_token().type == SPACE
    assert lexer.get_next_token() is None
    assert lexer.get_next_token() is None


def test_empty_source():
    assert tokenize("") == []
    assert tokenize("only comments here") == []


def test_bytes_source():
    assert types(tokenize(b"\t \n")) == [TAB, SPACE, LF]


def test_restart_from_scratch():
    source = " \t\n"
    assert types(Lexer(source)) == types(Lexer(source))
