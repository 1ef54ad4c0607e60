"""
Bot classification for pageview tracking.

Identifies AI scrapers, search crawlers, SEO tools, social media previews and
monitoring services from the User-Agent header. Classified pageviews are still
recorded; the dashboard splits them out so human traffic stays meaningful.

Design Principles:
- Ordered: categories are checked by priority, first match wins
- Named: known bots keep a display name for the bot breakdown chart
- Lenient: an empty user-agent is not counted as a bot
- Fallback: generic patterns catch unnamed bots as "other"
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BotType(str, Enum):
    """Categories of automated traffic."""

    AI_SCRAPER = "ai-scraper"            # GPTBot, ClaudeBot, etc.
    SEARCH_CRAWLER = "search-crawler"    # Googlebot, Bingbot, etc.
    SEO_TOOL = "seo-tool"                # Ahrefs, Semrush, etc.
    SOCIAL_MEDIA = "social-media"        # Link preview fetchers
    MONITORING = "monitoring"            # Uptime checks
    OTHER = "other"                      # Generic bot patterns matched


@dataclass(frozen=True)
class BotClassification:
    """
    Result of classifying a user-agent.

    Attributes:
        is_bot: Whether this is automated traffic
        bot_type: Category of the bot, None for humans
        bot_name: Display name for known bots, None otherwise
    """
    is_bot: bool
    bot_type: Optional[BotType] = None
    bot_name: Optional[str] = None

    def __bool__(self) -> bool:
        """Allow `if classification:` to check is_bot."""
        return self.is_bot


# =============================================================================
# BOT PATTERN DATABASE
# =============================================================================
# Each dict maps a lowercase substring to a display name, in priority order.

AI_SCRAPERS = {
    "gptbot": "GPTBot",
    "chatgpt-user": "ChatGPT",
    "claudebot": "ClaudeBot",
    "claude-web": "Claude",
    "anthropic-ai": "Anthropic-AI",
    "google-extended": "Google-Extended",
    "perplexitybot": "PerplexityBot",
    "youbot": "YouBot",
    "bytespider": "Bytespider",  # TikTok
    "diffbot": "Diffbot",
    "ai2bot": "AI2Bot",
    "facebookbot": "FacebookBot",
    "meta-externalagent": "Meta-ExternalAgent",
    "oai-searchbot": "OpenAI-SearchBot",
}

SEARCH_CRAWLERS = {
    "googlebot": "Googlebot",
    "bingbot": "Bingbot",
    "slurp": "Yahoo Slurp",
    "duckduckbot": "DuckDuckBot",
    "baiduspider": "Baiduspider",
    "yandexbot": "YandexBot",
    "sogou": "Sogou",
    "exabot": "Exabot",
}

SEO_TOOLS = {
    "semrushbot": "SemrushBot",
    "ahrefsbot": "AhrefsBot",
    "mj12bot": "MJ12bot",
    "dotbot": "DotBot",
    "screaming frog": "Screaming Frog",
    "seokicks": "SEOkicks",
}

SOCIAL_CRAWLERS = {
    "twitterbot": "Twitterbot",
    "linkedinbot": "LinkedInBot",
    "pinterestbot": "Pinterestbot",
    "discordbot": "Discordbot",
    "telegrambot": "TelegramBot",
    "slackbot": "Slackbot",
    "whatsapp": "WhatsApp",
}

MONITORING_BOTS = {
    "uptimerobot": "UptimeRobot",
    "pingdom": "Pingdom",
    "statuscake": "StatusCake",
    "site24x7": "Site24x7",
    "datadog": "Datadog",
}

PATTERN_GROUPS = (
    (AI_SCRAPERS, BotType.AI_SCRAPER),
    (SEARCH_CRAWLERS, BotType.SEARCH_CRAWLER),
    (SEO_TOOLS, BotType.SEO_TOOL),
    (SOCIAL_CRAWLERS, BotType.SOCIAL_MEDIA),
    (MONITORING_BOTS, BotType.MONITORING),
)

GENERIC_BOT_PATTERNS = [
    r"bot",
    r"crawler",
    r"spider",
    r"scraper",
    r"curl",
    r"wget",
    r"python-requests",
    r"axios",
    r"http",
]

_GENERIC_BOT_REGEX = re.compile("|".join(GENERIC_BOT_PATTERNS), re.IGNORECASE)

BOT_TYPE_DESCRIPTIONS = {
    BotType.AI_SCRAPER: "AI Scraper / LLM Bot",
    BotType.SEARCH_CRAWLER: "Search Engine Crawler",
    BotType.SEO_TOOL: "SEO Tool",
    BotType.SOCIAL_MEDIA: "Social Media Bot",
    BotType.MONITORING: "Monitoring Service",
    BotType.OTHER: "Other Bot",
}

NOT_A_BOT = BotClassification(is_bot=False)


def classify_bot(user_agent: Optional[str]) -> BotClassification:
    """
    Classify a user-agent string as human or bot.

    Args:
        user_agent: The User-Agent header string

    Returns:
        BotClassification with is_bot, bot_type and bot_name

    Examples:
        >>> classify_bot("Mozilla/5.0 (compatible; GPTBot/1.0)")
        BotClassification(is_bot=True, bot_type=<BotType.AI_SCRAPER: 'ai-scraper'>, bot_name='GPTBot')

        >>> classify_bot("")
        BotClassification(is_bot=False, bot_type=None, bot_name=None)
    """
    if not user_agent or not user_agent.strip():
        return NOT_A_BOT

    ua_lower = user_agent.lower()

    for patterns, bot_type in PATTERN_GROUPS:
        for pattern, name in patterns.items():
            if pattern in ua_lower:
                return BotClassification(is_bot=True, bot_type=bot_type, bot_name=name)

    if _GENERIC_BOT_REGEX.search(user_agent):
        return BotClassification(is_bot=True, bot_type=BotType.OTHER)

    return NOT_A_BOT


def get_bot_type_description(bot_type: Optional[str]) -> str:
    """Get a human-readable label for a bot type ("Unknown" when missing)."""
    if not bot_type:
        return "Unknown"
    try:
        return BOT_TYPE_DESCRIPTIONS[BotType(bot_type)]
    except ValueError:
        return str(bot_type)


def get_bot_type_counts(classifications: list[BotClassification]) -> dict[str, int]:
    """
    Get counts of bots by type.

    Args:
        classifications: Results from classify_bot()

    Returns:
        Dict mapping bot type value to count (humans are skipped)
    """
    counts: dict[str, int] = {}
    for c in classifications:
        if c.is_bot and c.bot_type:
            key = c.bot_type.value
            counts[key] = counts.get(key, 0) + 1
    return counts
