"""Tests for preview domain analysis and grouping."""

import pytest

from pageview_analytics.config import GroupingConfig
from pageview_analytics.domains import (
    EPHEMERAL_RULES,
    analyze_domain,
    calculate_similarity,
    count_previews,
    get_canonical_domain,
    group_domains,
    is_ephemeral_token,
    is_preview_domain,
)


class TestAnalyzeDomain:
    """Test single hostname analysis."""

    def test_production_domain_is_its_own_canonical(self):
        info = analyze_domain("myapp.com")
        assert info.canonical == "myapp.com"
        assert info.project_tokens == ("myapp",)
        assert info.is_preview is False
        assert info.confidence == 1.0

    def test_cloudflare_pages_hash(self):
        info = analyze_domain("a1b2c3d4.myapp.pages.dev")
        assert info.canonical == "myapp.pages.dev"
        assert info.project_tokens == ("myapp",)
        assert info.confidence == 1.0
        assert info.is_preview is True

    def test_cloudflare_pages_project_tokens_split_on_dash(self):
        info = analyze_domain("A1B2C3D4.my-app.pages.dev")
        assert info.project_tokens == ("my", "app")
        assert info.canonical == "my-app.pages.dev"

    def test_pages_hash_must_be_exactly_eight_chars(self):
        """Nine hex chars skip the Pages shortcut and are dropped as a hash."""
        info = analyze_domain("a1b2c3d4e.myapp.pages.dev")
        assert info.project_tokens == ()
        assert info.canonical == "a1b2c3d4e.myapp.pages.dev"
        assert info.is_preview is True

    def test_pages_branch_alias_is_preview(self):
        info = analyze_domain("main.myapp.pages.dev")
        assert info.project_tokens == ("main",)
        assert info.canonical == "main.myapp.pages.dev"
        assert info.is_preview is True

    def test_git_marker_and_branch_dropped(self):
        info = analyze_domain("api-git-feature.example.com")
        assert info.project_tokens == ("api",)
        assert info.canonical == "api.example.com"
        assert info.is_preview is True

    def test_only_token_after_git_is_dropped(self):
        info = analyze_domain("api-git-feature-xyz.example.com")
        assert info.project_tokens == ("api", "xyz")

    def test_git_as_first_token(self):
        info = analyze_domain("git-feature-api.example.com")
        assert info.project_tokens == ("api",)
        assert info.canonical == "api.example.com"

    def test_hex_hash_dropped(self):
        info = analyze_domain("myapp-a1b2c3d4.example.com")
        assert info.project_tokens == ("myapp",)
        assert info.canonical == "myapp.example.com"
        assert info.confidence == 0.5
        assert info.is_preview is True

    def test_hex_hash_case_insensitive(self):
        assert analyze_domain("myapp-A1B2C3D4.example.com").project_tokens == ("myapp",)

    def test_protected_branch_name_survives(self):
        info = analyze_domain("myapp-production.example.com")
        assert info.project_tokens == ("myapp", "production")
        assert info.canonical == "myapp-production.example.com"
        assert info.is_preview is False

    def test_protected_branch_name_any_case(self):
        info = analyze_domain("myapp-PRODUCTION.example.com")
        assert info.project_tokens == ("myapp", "PRODUCTION")

    def test_short_protected_names_hit_random_code_rule(self):
        """The allow-list only guards tokens of 9+ chars.

        "master" and "staging" have mostly distinct characters, so the
        random-code rule still drops them.
        """
        assert analyze_domain("myapp-master.example.com").project_tokens == ("myapp",)
        assert analyze_domain("myapp-staging.example.com").project_tokens == ("myapp",)
        assert analyze_domain("myapp-main.example.com").project_tokens == ("myapp", "main")

    def test_deployment_tool_prefix_dropped(self):
        assert analyze_domain("myapp-011cab.example.com").project_tokens == ("myapp",)

    def test_random_code_dropped(self):
        assert analyze_domain("myapp-x7k2p9.example.com").project_tokens == ("myapp",)

    def test_repetitive_code_kept(self):
        assert analyze_domain("myapp-aaabbb.example.com").project_tokens == ("myapp", "aaabbb")

    def test_fully_ephemeral_subdomain_keeps_original(self):
        info = analyze_domain("il3r78fte.vercel.app")
        assert info.project_tokens == ()
        assert info.canonical == "il3r78fte.vercel.app"
        assert info.is_preview is True
        assert info.confidence == 0.0

    def test_vercel_app_is_always_preview(self):
        info = analyze_domain("shop.vercel.app")
        assert info.canonical == "shop.vercel.app"
        assert info.is_preview is True
        assert info.confidence == 1.0

    def test_empty_string(self):
        info = analyze_domain("")
        assert info.original == ""
        assert info.canonical == ""
        assert info.project_tokens == ()
        assert info.is_preview is False
        assert info.confidence == 0.5

    def test_hostname_without_parent_domain(self):
        info = analyze_domain("shop")
        assert info.canonical == "shop"
        assert info.tld == ""
        assert info.is_preview is False

    def test_tld_property(self):
        assert analyze_domain("a.b.example.com").tld == "b.example.com"

    def test_deterministic(self):
        hostname = "il3r78fte-git-feature-branch.myproject.vercel.app"
        assert analyze_domain(hostname) == analyze_domain(hostname)

    @pytest.mark.parametrize("hostname", [
        "shop.com",
        "blog.example.org",
        "docs.vercel.app",
        "main.site.pages.dev",
    ])
    def test_plain_hostnames_unchanged(self, hostname):
        info = analyze_domain(hostname)
        assert info.canonical == hostname
        tld = hostname.split(".", 1)[1]
        assert info.is_preview == (tld == "vercel.app" or tld.endswith(".pages.dev"))


class TestEphemeralToken:
    """Test token classification rules directly."""

    def test_empty_token(self):
        assert is_ephemeral_token("", 0, [""]) is True

    def test_git_marker_is_case_sensitive(self):
        assert is_ephemeral_token("git", 0, ["git"]) is True
        assert is_ephemeral_token("GIT", 0, ["GIT"]) is False

    def test_claude_prefix(self):
        assert is_ephemeral_token("claude-abc", 0, ["claude-abc"]) is True

    def test_project_word(self):
        assert is_ephemeral_token("shop", 0, ["shop"]) is False

    def test_rules_are_predicate_outcome_pairs(self):
        for predicate, outcome in EPHEMERAL_RULES:
            assert callable(predicate)
            assert isinstance(outcome, bool)

    def test_only_protected_branch_rule_keeps_tokens(self):
        keeping = [p for p, outcome in EPHEMERAL_RULES if outcome is False]
        assert len(keeping) == 1
        assert keeping[0]("production", 0, ["production"]) is True
        assert keeping[0]("deadbeef1", 0, ["deadbeef1"]) is False


class TestSimilarity:
    """Test pairwise similarity scoring."""

    def test_same_canonical_is_perfect(self):
        a = analyze_domain("shop-a1b2c3d4.vercel.app")
        b = analyze_domain("shop.vercel.app")
        assert calculate_similarity(a, b) == 1.0

    def test_partial_overlap_with_shared_parent(self):
        a = analyze_domain("shop.com")
        b = analyze_domain("shop-login.com")
        assert calculate_similarity(a, b) == pytest.approx(0.7)

    def test_partial_overlap_different_parent(self):
        a = analyze_domain("shop.com")
        b = analyze_domain("shop-login.vercel.app")
        assert calculate_similarity(a, b) == pytest.approx(0.5)

    def test_empty_token_sets_score_zero(self):
        """No shared-parent bonus when neither side has project tokens."""
        a = analyze_domain("il3r78fte.vercel.app")
        b = analyze_domain("x7k2p9q1z.vercel.app")
        assert calculate_similarity(a, b) == 0.0

    def test_symmetric_and_capped(self):
        a = analyze_domain("api-shop.com")
        b = analyze_domain("shop-api.com")
        assert a.canonical != b.canonical
        assert calculate_similarity(a, b) == 1.0
        assert calculate_similarity(b, a) == 1.0

    def test_custom_bonus(self):
        a = analyze_domain("shop.example.com")
        b = analyze_domain("blog.example.com")
        config = GroupingConfig(tld_bonus=0.4)
        assert calculate_similarity(a, b, config) == pytest.approx(0.4)


HOSTNAMES = [
    "shop.com",
    "shop-git-feature-login.vercel.app",
    "a1b2c3d4.shop.pages.dev",
    "il3r78fte.vercel.app",
]


class TestGroupDomains:
    """Test grouping hostnames into production domains."""

    def test_empty_input(self):
        assert group_domains([]) == {}

    def test_mixed_platform_scenario(self):
        """Branch builds with extra project tokens and fully random ids stay apart."""
        groups = group_domains(HOSTNAMES)
        assert groups == {
            "shop.com": ["a1b2c3d4.shop.pages.dev", "shop.com"],
            "shop-git-feature-login.vercel.app": ["shop-git-feature-login.vercel.app"],
            "il3r78fte.vercel.app": ["il3r78fte.vercel.app"],
        }

    def test_git_branch_preview_joins_production(self):
        groups = group_domains([
            "shop.com",
            "shop-git-feature.vercel.app",
            "a1b2c3d4.shop.pages.dev",
        ])
        assert groups == {
            "shop.com": [
                "a1b2c3d4.shop.pages.dev",
                "shop-git-feature.vercel.app",
                "shop.com",
            ],
        }

    def test_production_preferred_over_shorter_preview(self):
        groups = group_domains(["a1b2c3d4.shop.pages.dev", "shop.com"])
        assert list(groups) == ["shop.com"]

    def test_shortest_preview_when_no_production(self):
        groups = group_domains(["myapp-a1b2c3d4.vercel.app", "myapp.vercel.app"])
        assert groups == {
            "myapp.vercel.app": ["myapp-a1b2c3d4.vercel.app", "myapp.vercel.app"],
        }

    def test_length_tie_broken_lexicographically(self):
        groups = group_domains(["shop-b1b2c3d4.vercel.app", "shop-a1b2c3d4.vercel.app"])
        assert list(groups) == ["shop-a1b2c3d4.vercel.app"]

    def test_unrelated_domains_stay_separate(self):
        groups = group_domains(["shop.example.com", "blog.example.com", "news.net"])
        assert len(groups) == 3

    def test_duplicates_collapsed(self):
        assert group_domains(["shop.com", "shop.com"]) == {"shop.com": ["shop.com"]}

    def test_lower_threshold_merges_more(self):
        hostnames = ["shop.com", "shop-login.vercel.app"]
        assert len(group_domains(hostnames)) == 2

        groups = group_domains(hostnames, GroupingConfig(merge_threshold=0.5))
        assert groups == {"shop.com": ["shop-login.vercel.app", "shop.com"]}

    def test_merge_compares_against_seed_only(self):
        """blog is close to shop-blog but not to the shop seed it merged into."""
        groups = group_domains([
            "shop.example.com",
            "shop-blog.example.com",
            "blog.example.com",
        ])
        assert groups == {
            "shop.example.com": ["shop-blog.example.com", "shop.example.com"],
            "blog.example.com": ["blog.example.com"],
        }

    def test_input_order_decides_seed(self):
        groups = group_domains([
            "blog.example.com",
            "shop.example.com",
            "shop-blog.example.com",
        ])
        assert groups == {
            "blog.example.com": ["blog.example.com", "shop-blog.example.com"],
            "shop.example.com": ["shop.example.com"],
        }

    def test_same_input_same_output(self):
        assert group_domains(HOSTNAMES) == group_domains(list(HOSTNAMES))

    def test_regrouping_is_stable(self):
        hostnames = [
            "shop.com",
            "shop-git-feature.vercel.app",
            "a1b2c3d4.shop.pages.dev",
            "blog.net",
            "blog-a1b2c3d4.vercel.app",
        ]
        first = group_domains(hostnames)
        flattened = [h for members in first.values() for h in members]
        assert group_domains(flattened) == first

    def test_every_hostname_in_exactly_one_group(self):
        groups = group_domains(HOSTNAMES)
        members = [h for group in groups.values() for h in group]
        assert sorted(members) == sorted(HOSTNAMES)


class TestQueryHelpers:
    """Test single-hostname helpers and preview counting."""

    def test_is_preview_domain(self):
        assert is_preview_domain("shop-git-feature.vercel.app") is True
        assert is_preview_domain("shop.com") is False

    def test_get_canonical_domain(self):
        assert get_canonical_domain("myapp-a1b2c3d4.example.com") == "myapp.example.com"
        assert get_canonical_domain("a1b2c3d4.myapp.pages.dev") == "myapp.pages.dev"

    def test_count_previews_mixed_scenario(self):
        assert count_previews("shop.com", HOSTNAMES) == 1

    def test_count_previews_with_git_branch(self):
        hostnames = [
            "shop.com",
            "shop-git-feature.vercel.app",
            "a1b2c3d4.shop.pages.dev",
            "il3r78fte.vercel.app",
        ]
        assert count_previews("shop.com", hostnames) == 2

    def test_count_previews_skips_production_members(self):
        hostnames = ["shop.com", "shop.net", "shop-a1b2c3d4.vercel.app"]
        assert count_previews("shop.com", hostnames) == 1

    def test_count_previews_requires_representative(self):
        assert count_previews("a1b2c3d4.shop.pages.dev", HOSTNAMES) == 0

    def test_count_previews_unknown_domain(self):
        assert count_previews("missing.com", HOSTNAMES) == 0
        assert count_previews("shop.com", []) == 0
