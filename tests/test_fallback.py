from textdeck.parsing.fallback import Draft, FallbackRules, RuleBasedParser, smart_fallback_parse


def test_report_memo_becomes_one_slide():
    text = (
        "AI Usage Report\n"
        "Core point: match model to task\n"
        "Model selection: pick the right model first\n"
    )
    slides = smart_fallback_parse(text)
    assert len(slides) == 1
    s = slides[0]
    assert s.title == "AI Usage Report"
    assert s.core_idea == "match model to task"
    assert s.arguments == ["Model selection: pick the right model first"]


def test_blank_text_gives_default_slide():
    for text in ("", "   \n\t\n  \n"):
        slides = smart_fallback_parse(text)
        assert len(slides) == 1
        assert slides[0].title == FallbackRules().default_title
        assert len(slides[0].arguments) == 3


def test_new_title_closes_previous_slide():
    text = "\n".join([
        "Quarterly results",
        "Revenue: up 12%",
        "Costs: flat",
        "Next steps",
        "Hiring: two engineers",
    ])
    slides = smart_fallback_parse(text)
    assert [s.title for s in slides] == ["Quarterly results", "Next steps"]
    assert slides[0].arguments == ["Revenue: up 12%", "Costs: flat"]
    assert slides[1].arguments == ["Hiring: two engineers"]
    assert [s.id for s in slides] == ["1", "2"]


def test_chinese_keywords_and_fullwidth_colon():
    text = "\n".join([
        "人工智能应用报告",
        "核心观点：AI正在改变世界",
        "机器学习：算法突破带来新能力",
        "深度学习：图像识别准确率大幅提升",
    ])
    slides = smart_fallback_parse(text)
    assert len(slides) == 1
    assert slides[0].title == "人工智能应用报告"
    assert slides[0].core_idea == "AI正在改变世界"
    assert slides[0].arguments == ["机器学习：算法突破带来新能力", "深度学习：图像识别准确率大幅提升"]


def test_core_prefix_precedence_is_first_match():
    p = RuleBasedParser()
    # "核心观点" is tried before "观点" and "核心"
    assert p.core_text("核心观点：重点") == "重点"
    assert p.core_text("Conclusion: ship it") == "ship it"
    # keyword not at the front: line kept whole
    assert p.core_text("The key point is speed") == "The key point is speed"


def test_keyword_only_core_line_is_discarded():
    slides = smart_fallback_parse("Weekly sync\nConclusion:\n")
    assert slides[0].title == "Weekly sync"
    assert slides[0].core_idea == FallbackRules().core_placeholder


def test_only_five_arguments_per_slide():
    lines = ["Launch plan"] + [f"Step {i}: do thing number {i}" for i in range(1, 9)]
    slides = smart_fallback_parse("\n".join(lines))
    assert len(slides) == 1
    assert len(slides[0].arguments) == 5
    assert slides[0].arguments[-1] == "Step 5: do thing number 5"


def test_long_first_line_becomes_title():
    long_line = "This opening sentence is definitely longer than thirty characters"
    slides = smart_fallback_parse(long_line + "\nOwner: platform team")
    assert slides[0].title == long_line
    assert slides[0].arguments == ["Owner: platform team"]


def test_overlong_line_without_title_is_ignored():
    slides = smart_fallback_parse("x" * 150)
    assert slides[0].title == FallbackRules().default_title


def test_classify_order():
    p = RuleBasedParser()
    empty = Draft()
    assert p.classify("Short heading", empty) == "title"
    assert p.classify("Core idea: keep the deck short and focused", empty) == "core"
    assert p.classify("Budget: we need more money for the project", empty) == "argument"
    assert p.classify("A sentence that is long enough to lead the slide", empty) == "first_title"
    assert p.classify("A sentence that is long enough to lead the slide", Draft(title="T")) is None


def test_custom_rules_are_honoured():
    rules = FallbackRules(title_max_len=5, max_arguments=1)
    p = RuleBasedParser(rules)
    slides = p.parse("Intro\nA: one\nB: two")
    assert slides[0].title == "Intro"
    assert slides[0].arguments == ["A: one"]


def test_errors_are_absorbed(monkeypatch):
    p = RuleBasedParser()

    def boom(line, draft):
        raise RuntimeError("bad rule")

    monkeypatch.setattr(p, "classify", boom)
    slides = p.parse("Anything at all")
    assert len(slides) == 1
    assert slides[0].title == p.rules.default_title


def test_lowercase_title_words_inside_arguments_stay_arguments():
    slides = smart_fallback_parse("Quarterly results\nRevenue report: up 12% year on year\nCosts: flat")
    assert len(slides) == 1
    assert slides[0].title == "Quarterly results"
    assert slides[0].arguments == ["Revenue report: up 12% year on year", "Costs: flat"]


def test_english_keywords_match_whole_words_only():
    p = RuleBasedParser()
    draft = Draft(title="T")
    # "Summary" inside "Summaryless" is not a keyword
    assert p.classify("Summaryless notes: nothing to see here today", draft) == "argument"
    assert p.classify("In summary: the rollout went well overall", draft) == "core"
    assert p.classify("Report: the rollout went well overall this quarter", draft) == "title"
