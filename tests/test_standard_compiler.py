import re
import unittest

from genpac.rules.standard import (
    DOMAIN_ANCHOR_PREFIX,
    SEPARATOR_CLASS,
    Bucket,
    Form,
    classify_rule,
    compile_standard,
    wildcard_to_regexp,
)


def test_wildcard_glob_translates_to_matching_regex():
    src = wildcard_to_regexp("*.example.com*")
    assert src == r".*\.example\.com.*"
    assert re.search(src, "http://a.example.com/x")
    assert not re.search(src, "http://example.org/")


def test_wildcard_escapes_regex_metacharacters():
    assert wildcard_to_regexp("a+b|c{1}[x](y)^$#\\") == r"a\+b\|c\{1\}\[x\]\(y\)\^\$\#\\"


def test_fullwidth_question_mark_is_single_char_wildcard():
    assert wildcard_to_regexp("a\uff1fb") == "a.b"
    # ASCII '?' is left alone.
    assert wildcard_to_regexp("a?b") == "a?b"


class TestClassifyRule(unittest.TestCase):
    def test_comments_and_blanks(self):
        self.assertIsNone(classify_rule(""))
        self.assertIsNone(classify_rule("   "))
        self.assertIsNone(classify_rule(' "" '))
        self.assertIsNone(classify_rule("! ||example.com"))
        self.assertIsNone(classify_rule("!@@||example.com"))

    def test_regex_literal(self):
        item = classify_rule("/foo.*bar/")
        self.assertEqual(item.form, Form.REGEXP)
        self.assertEqual(item.bucket, Bucket.PROXY)
        self.assertEqual(item.pattern, "foo.*bar")

    def test_exception_with_separator(self):
        item = classify_rule("@@||example.com^")
        self.assertEqual(item.bucket, Bucket.DIRECT)
        self.assertEqual(item.form, Form.REGEXP)
        # '^' wins over '||': the anchor stays escaped.
        self.assertEqual(item.pattern, r"\|\|example\.com" + SEPARATOR_CLASS)

    def test_separator_matches_end_or_delimiter(self):
        item = classify_rule("example.com^")
        rx = re.compile(item.pattern)
        self.assertTrue(rx.search("http://example.com/path"))
        self.assertTrue(rx.search("http://example.com"))
        self.assertFalse(rx.search("http://example.com.evil.net/"))

    def test_separator_takes_priority_over_left_anchor(self):
        item = classify_rule("|http://a.com^")
        self.assertTrue(item.pattern.startswith(r"\|http://a\.com"))
        self.assertTrue(item.pattern.endswith(SEPARATOR_CLASS))

    def test_domain_anchor(self):
        item = classify_rule("||ads.example.com")
        self.assertEqual(item.form, Form.REGEXP)
        self.assertEqual(item.pattern, DOMAIN_ANCHOR_PREFIX + r"ads\.example\.com")
        rx = re.compile(item.pattern)
        self.assertTrue(rx.search("https://ads.example.com/banner.js"))
        self.assertTrue(rx.search("http://cdn.ads.example.com/"))
        self.assertFalse(rx.search("http://example.com/?ads.example.com"))

    def test_left_and_right_anchors(self):
        self.assertEqual(classify_rule("|http://example.com").pattern, r"^http://example\.com")
        self.assertEqual(classify_rule("example.com/a.js|").pattern, r"example\.com/a\.js$")
        self.assertEqual(classify_rule("|https://*.example.com/").pattern, r"^https://.*\.example\.com/")

    def test_plain_rule_is_wrapped_wildcard(self):
        item = classify_rule("example.com")
        self.assertEqual(item.form, Form.WILDCARD)
        self.assertEqual(item.pattern, "*example.com*")

    def test_existing_asterisks_are_not_doubled(self):
        self.assertEqual(classify_rule("**foo*").pattern, "*foo*")
        self.assertEqual(classify_rule("@@*.example.com").pattern, "*.example.com*")

    def test_quotes_and_whitespace_are_trimmed(self):
        self.assertEqual(classify_rule('  "example.com" ').pattern, "*example.com*")


def test_compile_keeps_input_order_and_duplicates():
    out = compile_standard(
        [
            "a.com",
            "@@b.com",
            "! comment",
            "",
            "a.com",
            "||c.com",
            "/re/",
            "@@|http://d.com",
        ]
    )
    assert out.proxy_wildcard == ["*a.com*", "*a.com*"]
    assert out.direct_wildcard == ["*b.com*"]
    assert out.proxy_regexp == [DOMAIN_ANCHOR_PREFIX + r"c\.com", "re"]
    assert out.direct_regexp == [r"^http://d\.com"]
    assert len(out) == 6


def test_compile_empty_input():
    assert compile_standard([]).as_lists() == [[], [], [], []]


def test_compiled_patterns_are_valid_regex_and_globs():
    out = compile_standard(
        [
            "||google.com",
            "@@||cn.example.com^",
            "|https://x.example.net/*.js|",
            "example.org/path*",
            "/^https?:\\/\\/[^\\/]+blogspot\\.(.*)/",
        ]
    )
    for src in out.direct_regexp + out.proxy_regexp:
        re.compile(src)
    for glob in out.direct_wildcard + out.proxy_wildcard:
        assert glob.startswith("*") and glob.endswith("*")


if __name__ == "__main__":
    unittest.main()
