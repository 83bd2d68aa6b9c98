from speechsync.segmenter import SentenceSplitter, split_sentences


def test_splits_on_period_and_keeps_it():
    assert split_sentences("Hello world. This is a test.") == ["Hello world.", "This is a test."]


def test_question_and_exclamation_marks_are_boundaries():
    assert split_sentences("Ready? Go! Now.") == ["Ready?", "Go!", "Now."]


def test_terminator_runs_stay_together():
    assert split_sentences("Wait... what?! Fine.") == ["Wait...", "what?!", "Fine."]


def test_decimal_numbers_are_not_split():
    assert split_sentences("Pi is 3.14 roughly. Yes.") == ["Pi is 3.14 roughly.", "Yes."]


def test_text_without_terminator_is_one_sentence():
    assert split_sentences("  no punctuation here  ") == ["no punctuation here"]


def test_blank_text_gives_no_sentences():
    assert split_sentences("") == []
    assert split_sentences("   \n\t ") == []


def test_whitespace_is_trimmed_and_concatenation_rebuilds_input():
    text = "  First one.\n\nSecond   one.   Third.  "
    sentences = split_sentences(text)
    assert all(s == s.strip() and s for s in sentences)
    assert "".join(sentences).replace(" ", "") == "".join(text.split())


def test_terminators_are_configurable():
    splitter = SentenceSplitter(terminators=".")
    assert splitter.split("Really? Yes. Ok") == ["Really? Yes.", "Ok"]
