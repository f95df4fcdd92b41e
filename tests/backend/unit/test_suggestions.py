from giftexchange.backend.suggestions import NoSuggestions, normalize_language, safe_suggest


class _Exploding:
    def suggest(self, name, wishlist, lang):
        raise TimeoutError("slow model")


def test_normalize_language_falls_back_to_english() -> None:
    assert normalize_language("JA") == "ja"
    assert normalize_language(" es ") == "es"
    assert normalize_language("fr") == "en"
    assert normalize_language(None) == "en"


def test_default_suggester_returns_nothing() -> None:
    assert safe_suggest(NoSuggestions(), "Bo", ["scarf"], "en") == []


def test_failing_suggester_yields_empty_list() -> None:
    assert safe_suggest(_Exploding(), "Bo", [], "ko") == []
