"""
Tests for configuration defaults and overrides (env, CLI flags).
"""

from dscrawler.__main__ import build_parser
from dscrawler.fetcher import RetryPolicy
from dscrawler.run_config import CrawlerRunConfig
from dscrawler.scope_filter import LinkPolicy


class TestDefaults:

    def test_defaults(self):
        cfg = CrawlerRunConfig()
        assert cfg.max_pages == 50
        assert cfg.rate_delay == 1.0
        assert cfg.max_retries == 3
        assert cfg.navigation_timeout_ms == 30000
        assert cfg.settle_delay_ms == 1000
        assert cfg.min_detect_length == 20
        assert cfg.min_relevance == 5.0
        assert cfg.require_doc_path is True
        assert cfg.exclude_query_urls is True
        assert cfg.respect_robots is False
        assert cfg.headless is True
        assert (cfg.viewport_width, cfg.viewport_height) == (1200, 800)
        assert cfg.deny_patterns == []

    def test_retry_policy(self):
        assert CrawlerRunConfig(max_retries=5, retry_backoff=2.0).retry_policy() == RetryPolicy(
            max_attempts=5, delay=1.0, backoff=2.0,
        )

    def test_retry_policy_always_one_attempt(self):
        assert CrawlerRunConfig(max_retries=0).retry_policy().max_attempts == 1

    def test_link_policy(self):
        policy = CrawlerRunConfig(require_doc_path=False, deny_patterns=["/blog/"]).link_policy(
            "https://example.com/"
        )
        assert isinstance(policy, LinkPolicy)
        assert policy.accept("https://example.com/about")
        assert not policy.accept("https://example.com/blog/post")


class TestFromEnv:

    def test_values_converted(self):
        cfg = CrawlerRunConfig.from_env({
            "DSCRAWLER_MAX_PAGES": "12",
            "DSCRAWLER_RATE_DELAY": "0.25",
            "DSCRAWLER_HEADLESS": "false",
            "DSCRAWLER_RESPECT_ROBOTS": "yes",
            "DSCRAWLER_DENY_PATTERNS": "/blog/, /legacy/ ,",
            "DSCRAWLER_OUTPUT_JSON": "out.json",
            "UNRELATED": "1",
        })
        assert cfg.max_pages == 12
        assert cfg.rate_delay == 0.25
        assert cfg.headless is False
        assert cfg.respect_robots is True
        assert cfg.deny_patterns == ["/blog/", "/legacy/"]
        assert cfg.output_json == "out.json"

    def test_bad_values_ignored(self):
        cfg = CrawlerRunConfig.from_env({"DSCRAWLER_MAX_PAGES": "many", "DSCRAWLER_HEADLESS": "maybe"})
        assert cfg.max_pages == 50
        assert cfg.headless is True

    def test_empty_environment(self):
        assert CrawlerRunConfig.from_env({}) == CrawlerRunConfig()


class TestFromCliArgs:

    def test_flags_override(self):
        args = build_parser().parse_args([
            "https://example.com/docs/",
            "--pages", "10", "--timeout", "12.5", "--rate", "0", "--retries", "2",
            "--settle-ms", "300", "--all-paths", "--allow-query",
            "--deny-pattern", "/blog/", "--deny-pattern", "/v1/",
            "--respect-robots", "--headful", "--output-json", "out.json",
        ])
        cfg = CrawlerRunConfig.from_cli_args(args)
        assert cfg.max_pages == 10
        assert cfg.navigation_timeout_ms == 12500
        assert cfg.rate_delay == 0
        assert cfg.max_retries == 2
        assert cfg.settle_delay_ms == 300
        assert cfg.require_doc_path is False
        assert cfg.exclude_query_urls is False
        assert cfg.deny_patterns == ["/blog/", "/v1/"]
        assert cfg.respect_robots is True
        assert cfg.headless is False
        assert cfg.output_json == "out.json"

    def test_unset_flags_keep_base(self):
        base = CrawlerRunConfig(max_pages=7, rate_delay=2.0, deny_patterns=["/old/"])
        args = build_parser().parse_args(["https://example.com/docs/", "--deny-pattern", "/new/"])
        cfg = CrawlerRunConfig.from_cli_args(args, base=base)
        assert cfg.max_pages == 7
        assert cfg.rate_delay == 2.0
        assert cfg.require_doc_path is True
        assert cfg.deny_patterns == ["/old/", "/new/"]

    def test_log_summary(self, caplog):
        caplog.set_level("INFO", logger="dscrawler.run_config")
        CrawlerRunConfig(deny_patterns=["x"]).log_summary("https://example.com/docs/")
        assert "CRAWL RUN CONFIG" in caplog.text
        assert "Deny Patterns:    1 configured" in caplog.text


class TestRetryDelay:

    def test_follows_rate_delay_by_default(self):
        args = build_parser().parse_args(["https://example.com/docs/", "--rate", "2.5"])
        cfg = CrawlerRunConfig.from_cli_args(args)
        assert cfg.retry_delay is None
        assert cfg.retry_policy().delay == 2.5

    def test_explicit_flag_wins(self):
        args = build_parser().parse_args(["https://example.com/docs/", "--rate", "2.5", "--retry-delay", "0.2"])
        assert CrawlerRunConfig.from_cli_args(args).retry_policy().delay == 0.2

    def test_from_env(self):
        cfg = CrawlerRunConfig.from_env({"DSCRAWLER_RETRY_DELAY": "0.75"})
        assert cfg.retry_delay == 0.75
        assert cfg.retry_policy().delay == 0.75
