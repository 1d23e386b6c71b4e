"""Prompts for the reasoning provider.

SYSTEM_PROMPT is fixed for a whole session; build_reasoning_prompt() builds
the per-bookmark user prompt.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from smaug.core.bookmark import Bookmark, ContextPost

# Closed label set the provider must choose from
REASONING_CATEGORIES = ("GitHub", "Article", "Video", "Podcast", "Tool", "General")

# Characters of replied-to/quoted text included in the prompt
CONTEXT_MAX_CHARS = 120

SYSTEM_PROMPT = """You are a bookmark categorization expert. Analyze tweets to determine best category for organizing bookmarks.

CATEGORIES (YOU MUST CHOOSE EXACTLY ONE OF THESE SIX):
- GitHub: Code repositories, open source projects, libraries, tools, npm packages, APIs, frameworks, automation tools, SDKs (URL contains github.com, npmjs.com, or mentions repo, library, framework, tool, automation, scene, blender)
- Article: Blog posts, tutorials, guides, documentation, courses, learning resources, tips, deals, student benefits, comprehensive lists, AI/ML content, vision systems, chat applications, RAG content, operating systems, millionaire stories, personal AI projects, 3D content (URL contains medium.com, substack.com, dev.to, or mentions article, tutorial, guide, course, resource, learning, tip, deal, free, comprehensive, ultimate, vision, personal, chat, history, conversations, millionaire, 3d)
- Video: YouTube videos, tutorials, conference talks, screencasts (URL contains youtube.com, youtu.be, or mentions video, watch, talk)
- Podcast: Audio content, interviews, discussions (URL contains podcasts.apple.com, spotify.com/episode, overcast.fm, or mentions podcast, episode, audio)
- Tool: Utilities, apps, services, libraries, frameworks, npm packages, APIs (URL contains npmjs.com, pypi.org, or mentions library, framework, app, utility)
- General: Anything that does not fit above - ideas, thoughts, announcements, memes, news without specific content links

CRITICAL CATEGORIZATION RULES (FOLLOW STRICTLY):
1. YOU MUST ALWAYS RETURN A VALID CATEGORY - never return empty, None, N/A, or undefined
2. If unsure between GitHub and Article, prefer Article for content that is educational/discussion-focused
3. For AI/Tech content: use GitHub for actual tools/repos/libraries, use Article for concepts, visions, discussions, news
4. Specific pattern mappings: Chat History/Vision -> Article, Millionaire/Millionaires -> Article, 3D Generation/Scene -> Article (unless it's a specific tool), Personal AI OS -> Article
5. For comprehensive lists, resources, deals, guides - prefer Article
6. Check URL patterns FIRST - github.com -> GitHub, youtube.com -> Video, medium.com -> Article
7. If no URL, analyze tweet content for keywords indicating content type
8. When unsure, default to Article for anything tech/education related

QUALITY GUIDELINES:
- Ensure category matches the primary content type
- Do not over-categorize simple discussions as tools
- Educational/learning content should prefer Article
- 3D content typically Article unless it's a specific 3D tool repository

Return ONLY valid JSON object with keys: title, summary, tags, category.
No markdown formatting, no code blocks, no explanations."""


def _context_line(label: str, context: Optional["ContextPost"]) -> str:
    if context is None:
        return ""
    return f'\n\n{label} @{context.author}: "{context.text[:CONTEXT_MAX_CHARS]}"'


def build_reasoning_prompt(bookmark: "Bookmark") -> str:
    """Build the per-bookmark prompt.

    Includes the author, raw text, expanded link URLs and up to
    CONTEXT_MAX_CHARS of any replied-to or quoted post.
    """
    link_info = ""
    if bookmark.links:
        link_info = "\n\nLinks: " + "\n".join(link.expanded for link in bookmark.links)

    reply_info = _context_line("Replying to", bookmark.reply_context)
    quote_info = _context_line("Quoting", bookmark.quote_context)

    return f"""Analyze this tweet and extract metadata for bookmark organization.

Tweet by: @{bookmark.author}
Tweet text: {bookmark.text}{link_info}{reply_info}{quote_info}

Return JSON object with:
- title: Clean, concise title (max 60 chars, no hashtags)
- summary: 1-2 sentence summary of the content
- tags: Array of 2-4 relevant tags (lowercase, hyphenated)
- category: One of: {", ".join(REASONING_CATEGORIES)}"""
