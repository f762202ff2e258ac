# src/textdeck/parsing/fallback.py
"""
Rule-based slide extraction used when no model output is available.

Each non-blank line is classified by an ordered list of `LineRule`s (first
match wins) and folded into a draft slide:

  title        short line without a colon, or a line with a title keyword
  core         line mentioning a core-idea keyword; the keyword prefix is stripped
  argument     line with a colon, kept verbatim (max 5 per slide)
  first_title  10 < len <= 100 while the draft has no title yet

The pass never raises: any error degrades to the single default slide.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from textdeck.core.logging import get_logger
from textdeck.models.slide import Slide

log = get_logger(__name__)

COLONS = (":", "：")


@dataclass(frozen=True)
class FallbackRules:
    title_keywords: Tuple[str, ...] = (
        "标题", "主题", "PPT", "演示", "报告",
        "Title", "Topic", "Report", "Presentation",
    )
    # Order matters: it is also the prefix-stripping precedence.
    core_keywords: Tuple[str, ...] = (
        "核心观点", "观点", "认为", "核心", "关键", "重要", "本质", "精髓", "总结", "结论",
        "Core point", "Core idea", "Viewpoint", "Key point", "Key takeaway",
        "Essence", "Conclusion", "Summary",
    )
    title_max_len: int = 30
    first_title_min_len: int = 10
    first_title_max_len: int = 100
    max_arguments: int = 5

    untitled: str = "Untitled slide"
    core_placeholder: str = "Core idea"
    argument_placeholder: str = "Add supporting arguments"
    default_title: str = "Text parsing result"
    default_core_idea: str = "Content extracted with rule-based parsing"
    default_arguments: Tuple[str, ...] = (
        "Content one: information extracted from the text",
        "Content two: grouped by rule-based classification",
        "Content three: presented as structured slides",
    )


@dataclass
class Draft:
    title: Optional[str] = None
    core_idea: Optional[str] = None
    arguments: List[str] = field(default_factory=list)

    def is_emittable(self) -> bool:
        return bool(self.title or self.core_idea)


@dataclass(frozen=True)
class LineRule:
    kind: str
    matches: Callable[[str, Draft], bool]


def _has_colon(line: str) -> bool:
    return any(c in line for c in COLONS)


def _keyword_pattern(keyword: str, ignore_case: bool) -> re.Pattern:
    # CJK keywords and acronyms match anywhere as written; English words only as whole words
    if keyword.isascii() and not keyword.isupper():
        return re.compile(r"\b" + re.escape(keyword) + r"\b", re.I if ignore_case else 0)
    return re.compile(re.escape(keyword))


def build_line_rules(rules: FallbackRules) -> Tuple[LineRule, ...]:
    # English title words count only when capitalized as in a heading ("Report", not "report")
    title_patterns = [_keyword_pattern(k, ignore_case=False) for k in rules.title_keywords]
    core_patterns = [_keyword_pattern(k, ignore_case=True) for k in rules.core_keywords]

    def is_title(line: str, draft: Draft) -> bool:
        if len(line) <= rules.title_max_len and not _has_colon(line):
            return True
        return any(p.search(line) for p in title_patterns)

    def is_core(line: str, draft: Draft) -> bool:
        return any(p.search(line) for p in core_patterns)

    def is_argument(line: str, draft: Draft) -> bool:
        return _has_colon(line)

    def is_first_title(line: str, draft: Draft) -> bool:
        return not draft.title and rules.first_title_min_len < len(line) <= rules.first_title_max_len

    return (
        LineRule("title", is_title),
        LineRule("core", is_core),
        LineRule("argument", is_argument),
        LineRule("first_title", is_first_title),
    )


def _strip_patterns(keywords: Sequence[str]) -> Tuple[re.Pattern, ...]:
    out = []
    for k in keywords:
        flags = re.I if (k.isascii() and not k.isupper()) else 0
        out.append(re.compile(r"^\s*" + re.escape(k) + r"\s*[:：]\s*", flags))
    return tuple(out)


class RuleBasedParser:
    def __init__(self, rules: FallbackRules = FallbackRules()):
        self.rules = rules
        self.line_rules = build_line_rules(rules)
        self._strip = _strip_patterns(rules.core_keywords)

    def classify(self, line: str, draft: Draft) -> Optional[str]:
        for rule in self.line_rules:
            if rule.matches(line, draft):
                return rule.kind
        return None

    def core_text(self, line: str) -> str:
        for pat in self._strip:
            m = pat.match(line)
            if m:
                return line[m.end():].strip()
        return line

    def _to_slide(self, draft: Draft, position: int) -> Slide:
        return Slide(
            id=str(position),
            title=draft.title or self.rules.untitled,
            coreIdea=draft.core_idea or self.rules.core_placeholder,
            arguments=list(draft.arguments) or [self.rules.argument_placeholder],
        )

    def default_slides(self) -> List[Slide]:
        return [Slide(
            id="1",
            title=self.rules.default_title,
            coreIdea=self.rules.default_core_idea,
            arguments=list(self.rules.default_arguments),
        )]

    def _scan(self, text: str) -> List[Slide]:
        slides: List[Slide] = []
        draft = Draft()

        for raw in (text or "").split("\n"):
            line = raw.strip()
            if not line:
                continue
            kind = self.classify(line, draft)

            if kind == "title":
                if draft.title:
                    slides.append(self._to_slide(draft, len(slides) + 1))
                    draft = Draft()
                draft.title = line
            elif kind == "core":
                core = self.core_text(line)
                if core:
                    draft.core_idea = core
            elif kind == "argument":
                if len(draft.arguments) < self.rules.max_arguments:
                    draft.arguments.append(line)
            elif kind == "first_title":
                draft.title = line

        if draft.is_emittable():
            slides.append(self._to_slide(draft, len(slides) + 1))
        return slides

    def parse(self, text: str) -> List[Slide]:
        try:
            slides = self._scan(text)
        except Exception:
            log.exception("rule-based parsing failed; using default slide")
            return self.default_slides()
        if not slides:
            return self.default_slides()
        log.info("rule-based parsing produced %d slide(s)", len(slides))
        return slides


_default_parser = RuleBasedParser()


def smart_fallback_parse(text: str) -> List[Slide]:
    return _default_parser.parse(text)
