import pytest

from services.matcher import KeywordMatcher, match, whole_word_pattern


def test_case_and_accent_insensitive():
    res = match("CAFÉ", ["cafe"])
    assert res.matched
    assert res.keyword == "cafe"
    assert not res.plural


def test_keyword_with_accents_matches_plain_text():
    assert match("travail rémunéré", ["remunere"]).matched
    assert match("travail remunere", ["rémunéré"]).matched


def test_confusable_letters_fold_to_latin():
    assert match("ѕсаm", ["scam"]).matched


def test_whole_word_only():
    assert not match("scammer", ["scam"]).matched
    assert not match("antiscam", ["scam"]).matched
    assert match("it's a scam!", ["scam"]).matched


def test_boundary_is_unicode_aware():
    # соседняя буква не латинская, всё равно не граница
    assert not match("scamж", ["scam"]).matched
    assert not match("日scam", ["scam"]).matched
    assert not match("scam2", ["scam"]).matched


def test_plural_allowance_for_single_words():
    res = match("cryptos are great", ["crypto"])
    assert res.matched
    assert res.plural
    assert res.keyword == "crypto"
    assert res.label == "crypto (plural)"


def test_no_plural_allowance_for_phrases():
    assert match("buy now cheap", ["buy now"]).matched
    assert not match("buy nows", ["buy now"]).matched


def test_phrase_matches_across_punctuation_and_newlines():
    assert match("Buy\nNOW!!!", ["buy now"]).matched
    assert match("passive...income", ["passive income"]).matched


def test_invisible_characters_inside_text_and_keyword():
    assert match("s\u200bcam", ["scam"]).matched
    assert match("total scam", ["s\u200bcam"]).matched


def test_currency_token_matches():
    assert match("send me €100", ["eur"]).matched
    assert match("only $5", ["usd"]).matched


def test_first_keyword_in_list_order_wins():
    res = match("crypto casino night", ["casino", "crypto"])
    assert res.keyword == "casino"


def test_exact_match_reported_without_plural_flag():
    res = match("crypto and cryptos", ["crypto"])
    assert res.matched and not res.plural


def test_empty_text_never_matches():
    assert not match("", ["scam"]).matched
    assert not match(None, ["scam"]).matched
    assert not match("   ...", ["scam"]).matched


def test_degenerate_keywords_dropped_at_load():
    matcher = KeywordMatcher(["!!!", "", "  ", "\u200b", "scam"])
    assert len(matcher) == 1
    assert matcher.keywords[0].raw == "scam"
    assert not matcher.match("hello world").matched


def test_symbol_only_keyword_never_matches_everything():
    matcher = KeywordMatcher(["***"])
    assert len(matcher) == 0
    assert not matcher.match("anything at all").matched


def test_no_match_result():
    res = match("hello there", ["scam", "crypto"])
    assert not res.matched
    assert res.keyword is None
    assert res.label == "?"


def test_whole_word_pattern_rejects_empty():
    with pytest.raises(ValueError):
        whole_word_pattern("")


def test_uppercase_armenian_lookalikes_match():
    assert match("ՍSDT", ["usdt"]).matched
    assert match("buy ՍSDT now", ["usdt"]).matched
