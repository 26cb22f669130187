import responses

from zeroplugins.nbnhhsh.guess import GUESS_API, extract_guesses, guess


def test_extract_translations():
    payload = [{"name": "yyds", "trans": ["永远的神", "永远单身"]}]
    assert extract_guesses(payload) == ["永远的神", "永远单身"]


def test_extract_falls_back_to_inputting():
    payload = [{"name": "abc", "inputting": ["啊不错"]}]
    assert extract_guesses(payload) == ["啊不错"]


def test_extract_trans_preferred_even_when_empty():
    payload = [{"name": "abc", "trans": [], "inputting": ["x"]}]
    assert extract_guesses(payload) == []


def test_extract_empty_payload():
    assert extract_guesses([]) == []
    assert extract_guesses([{"name": "q"}]) == []


def test_guess_posts_form():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, GUESS_API, json=[{"name": "yyds", "trans": ["永远的神"]}])
        assert guess("yyds") == ["永远的神"]
        assert rsps.calls[0].request.body == "text=yyds"