"""
Research Tools
--------------
Search and research through the web API (Perplexity, OpenAI deep
research) and public Reddit listings.

Results are formatted as markdown for the client to display or store
with create_research_asset.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Literal
import logging

from pydantic import Field

from core.gate import ToolGroup, tool_flag_name

from .dispatcher import ToolResponse
from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.research")

PERPLEXITY_ENDPOINT = "/tools/perplexity-search"
DEEP_RESEARCH_ENDPOINT = "/tools/openai-deep-research"
REDDIT_LISTING_URL = "https://www.reddit.com/r/{subreddit}/{sort}.json"
BUNDLE_SWITCH = tool_flag_name("use_perplexity")

RESEARCH_ASSET_HINT = (
    'Create a research asset file. Example: create_research_asset({ name: "FILE_NAME", content: "RESEARCH_CONTENT" })'
)


class UsePerplexityParams(ToolParams):
    query: str = Field(description="The search query or question to research")
    search_mode: Literal["web", "academic"] = Field(
        description="Controls the search mode used for the request. When set to 'academic', results will "
                    "prioritize scholarly sources like peer-reviewed papers and academic journals. (default: web)",
    )


class UseOpenAIDeepResearchParams(ToolParams):
    query: str = Field(description="The research query or question to investigate deeply")


class FetchRedditPostsParams(ToolParams):
    subreddit: str = Field(description="Subreddit name without the r/ prefix, e.g. 'startups'")
    sort: Literal["hot", "new", "top", "rising"] = Field(default="hot", description="Listing order")
    limit: int = Field(default=10, ge=1, le=100, description="Number of posts to fetch (1-100)")
    time_filter: Literal["hour", "day", "week", "month", "year", "all"] = Field(
        default="week",
        description="Time window, only used with sort 'top'",
    )


async def use_perplexity(ctx: "ToolContext", params: UsePerplexityParams) -> ToolResponse:
    logger.info(f'Performing ({params.search_mode}) search with Perplexity via web API on query: "{params.query}"')

    data = await ctx.api.post_json(
        PERPLEXITY_ENDPOINT,
        {"query": params.query, "search_mode": params.search_mode},
        purpose="Perplexity search via web API",
        validation_message="Request validation failed. Please check the query and search_mode parameters.",
    )

    result = data.get("result") or ""
    citations = data.get("citations") or []
    usage = data.get("usage")
    logger.info(f"Search completed successfully via web API. Response length: {len(result)} characters")
    if usage:
        logger.info(
            f"Token usage - Prompt: {usage.get('prompt_tokens')}, "
            f"Completion: {usage.get('completion_tokens')}, Total: {usage.get('total_tokens')}"
        )

    formatted = "\n".join([
        f'# Search Results for: "{params.query}"',
        "",
        result,
        "",
        "---",
        "## Citations",
        "\n".join(str(c) for c in citations),
        "",
        "---",
        f"*Search powered by Perplexity AI ({data.get('model')}) via Web API*",
    ])

    return ToolResponse.text(
        formatted,
        "Next steps:\n"
        "- Display the search results with citations. IMPORTANT: IF CITATIONS ARE PROVIDED, "
        "DISPLAY THEM IN THE RESPONSE.\n"
        f"- {RESEARCH_ASSET_HINT}",
    )


async def use_openai_deep_research(ctx: "ToolContext", params: UseOpenAIDeepResearchParams) -> ToolResponse:
    logger.info(f'Performing deep research via web API on query: "{params.query}"')

    data = await ctx.api.post_json(
        DEEP_RESEARCH_ENDPOINT,
        {"query": params.query},
        purpose="OpenAI deep research via web API",
        validation_message="Request validation failed. Please check the query parameter.",
    )

    result = data.get("result") or ""
    logger.info(f"Deep research completed successfully via web API. Response length: {len(result)} characters")

    formatted = "\n".join([
        f'# Deep Research Results for: "{params.query}"',
        "",
        "## Enriched Research Instructions",
        str(data.get("enriched_query") or ""),
        "",
        "---",
        "",
        "## Research Findings",
        result,
        "",
        "---",
        f"*Deep research powered by OpenAI {data.get('model')} via Web API*",
    ])

    return ToolResponse.text(formatted, f"Next steps:\n- {RESEARCH_ASSET_HINT}")


def format_reddit_post(index: int, post: Dict[str, Any]) -> str:
    created = post.get("created_utc")
    when = (
        datetime.fromtimestamp(float(created), tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        if created is not None
        else "unknown"
    )
    lines = [
        f"## {index}. {post.get('title', '(untitled)')}",
        f"u/{post.get('author', '[deleted]')} | score {post.get('score', 0)} | "
        f"{post.get('num_comments', 0)} comments | {when}",
        f"https://www.reddit.com{post.get('permalink', '')}",
    ]
    selftext = (post.get("selftext") or "").strip()
    if selftext:
        lines.extend(["", selftext[:1000] + ("..." if len(selftext) > 1000 else "")])
    return "\n".join(lines)


async def fetch_reddit_posts(ctx: "ToolContext", params: FetchRedditPostsParams) -> ToolResponse:
    subreddit = params.subreddit.strip().removeprefix("r/").strip("/")
    logger.info(f"Fetching {params.limit} {params.sort} posts from r/{subreddit}")

    query: Dict[str, Any] = {"limit": params.limit, "raw_json": 1}
    if params.sort == "top":
        query["t"] = params.time_filter

    listing = await ctx.api.get_json(
        REDDIT_LISTING_URL.format(subreddit=subreddit, sort=params.sort),
        params=query,
        purpose=f"Reddit listing for r/{subreddit}",
    )

    children = listing.get("data", {}).get("children", []) if isinstance(listing, dict) else []
    posts = [child.get("data", {}) for child in children if isinstance(child, dict)]
    if not posts:
        return ToolResponse.text(f"No posts found in r/{subreddit}")

    sections = [f"# r/{subreddit} ({params.sort})"]
    sections.extend(format_reddit_post(i, post) for i, post in enumerate(posts, start=1))
    return ToolResponse.text("\n\n".join(sections), f"Next steps:\n- {RESEARCH_ASSET_HINT}")


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    groups = frozenset({ToolGroup.RESEARCH})

    async def perplexity(params: UsePerplexityParams) -> ToolResponse:
        return await use_perplexity(ctx, params)

    async def deep_research(params: UseOpenAIDeepResearchParams) -> ToolResponse:
        return await use_openai_deep_research(ctx, params)

    async def reddit(params: FetchRedditPostsParams) -> ToolResponse:
        return await fetch_reddit_posts(ctx, params)

    return [
        ToolDescriptor(
            name="use_perplexity",
            description=(
                "Perform search and information gathering using Perplexity AI via web API. IMPORTANT: You "
                "MUST provide the query and search_mode parameters as well as display the citations in the "
                'response, if provided. Example: use_perplexity({ query: "What is the capital of France?", '
                'search_mode: "web" })'
            ),
            handler=perplexity,
            parameter_schema=UsePerplexityParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
        ToolDescriptor(
            name="use_openai_deep_research",
            description=(
                "Perform deep research using OpenAI deep research model via web API. First enriches the "
                "query with detailed research instructions, then conducts comprehensive research. Requires "
                "BOLIDEAI_API_TOKEN for authentication. IMPORTANT: You MUST provide the query parameter. "
                'Example: use_openai_deep_research({ query: "Economic impact of renewable energy adoption" })'
            ),
            handler=deep_research,
            parameter_schema=UseOpenAIDeepResearchParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
        ToolDescriptor(
            name="fetch_reddit_posts",
            description=(
                "Fetch recent posts from a public subreddit to research what a community is discussing. "
                'Example: fetch_reddit_posts({ subreddit: "startups", sort: "top", limit: 10, '
                'time_filter: "week" })'
            ),
            handler=reddit,
            parameter_schema=FetchRedditPostsParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
    ]
