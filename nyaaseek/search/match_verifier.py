"""Accept or reject one feed candidate for one search request."""

from __future__ import annotations

from nyaaseek.search.similarity import DEFAULT_SIMILARITY_THRESHOLD, Scorer, best_rating, dice_coefficient
from nyaaseek.search.title_parser import as_episode_number, parse_episode_range
from nyaaseek.search.types import MatchResult, ParsedTitle, SearchMode, SearchRequest

BATCH_MARKER = "batch"
SINGLE_RELEASE_EPISODE = "01"


def verify_candidate(
    request: SearchRequest,
    parsed: ParsedTitle,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    scorer: Scorer = dice_coefficient,
) -> MatchResult:
    """Decide whether ``parsed`` is the release ``request`` asks for.

    Title similarity and resolution are checked for every mode. On success
    the result carries the episode token to name the download with.
    """
    rating = best_rating(request.title.lower(), parsed.variants, scorer)
    if rating < threshold:
        return MatchResult.fail(f"title similarity {rating:.2f} below {threshold:.2f}")
    if request.resolution not in parsed.resolution:
        return MatchResult.fail(f"resolution '{parsed.resolution}' lacks '{request.resolution}'")

    if request.mode is SearchMode.EPISODE:
        return _verify_episode(request, parsed)
    if request.mode is SearchMode.BATCH:
        return _verify_batch(request, parsed)
    return MatchResult(passed=True, episode=request.episode or SINGLE_RELEASE_EPISODE)


def _verify_episode(request: SearchRequest, parsed: ParsedTitle) -> MatchResult:
    candidate_episode = as_episode_number(parsed.episode)
    if candidate_episode is None:
        return MatchResult.fail("no episode number")
    if candidate_episode != as_episode_number(request.episode):
        return MatchResult.fail(f"episode {parsed.episode} is not {request.episode}")
    return MatchResult(passed=True, episode=request.episode)


def _verify_batch(request: SearchRequest, parsed: ParsedTitle) -> MatchResult:
    found_range = parse_episode_range(parsed.file_name)
    if found_range is not None:
        # A range in the file name decides on its own.
        wanted_range = parse_episode_range(request.episode or "")
        if wanted_range != found_range:
            return MatchResult.fail(f"range {found_range.start}-{found_range.end} is not {request.episode}")
        return MatchResult(passed=True, episode=request.episode)

    if parsed.release_information and BATCH_MARKER in parsed.release_information.lower():
        return MatchResult(passed=True, episode=request.episode)
    # Weak signal: many batches carry no marker, only the lack of an episode number.
    if parsed.episode is None:
        return MatchResult(passed=True, episode=request.episode)
    return MatchResult.fail("single episode release")
