import pytest

from kaleereads.viewer.response import (
    SecureViewParseError, parse_secure_view_response, BOOK_MISSING, URL_MISSING
)

BOOK = {'id': 7, 'title': 'Kalenjin Tales', 'fileType': 'pdf', 'author': {'user': {'name': 'Chebet Kiprono'}}}


def test_enveloped_payload():
    parsed = parse_secure_view_response({'data': {'book': BOOK, 'secureUrl': 'https://files/x'}})
    assert parsed.secure_url == 'https://files/x'
    assert parsed.book.id == 7
    assert parsed.book.title == 'Kalenjin Tales'
    assert parsed.book.file_type == 'pdf'
    assert parsed.book.author_name == 'Chebet Kiprono'


def test_flat_payload():
    parsed = parse_secure_view_response({'book': BOOK, 'secureUrl': 'https://files/y'})
    assert parsed.secure_url == 'https://files/y'


def test_missing_author_falls_back():
    parsed = parse_secure_view_response({'book': {'id': 1, 'title': 'T'}, 'secureUrl': 'u'})
    assert parsed.book.author_name == 'Unknown Author'
    parsed = parse_secure_view_response({'book': {'id': 1, 'author': {'user': None}}, 'secureUrl': 'u'})
    assert parsed.book.author_name == 'Unknown Author'


@pytest.mark.parametrize('payload', [
    {'data': {'secureUrl': 'u'}},
    {'secureUrl': 'u'},
    {'data': {'book': None, 'secureUrl': 'u'}},
    {'data': ['not', 'an', 'object']},
    [],
    None,
])
def test_book_missing(payload):
    with pytest.raises(SecureViewParseError) as exc:
        parse_secure_view_response(payload)
    assert str(exc.value) == BOOK_MISSING


@pytest.mark.parametrize('payload', [
    {'data': {'book': BOOK}},
    {'book': BOOK, 'secureUrl': ''},
    {'book': BOOK, 'secureUrl': 42},
])
def test_secure_url_missing(payload):
    with pytest.raises(SecureViewParseError) as exc:
        parse_secure_view_response(payload)
    assert str(exc.value) == URL_MISSING
