"""
Content Generator Tools
-----------------------
Screencast analysis through the web API, GIF clips and speech
enhancement with ffmpeg.

Media work runs ffmpeg/ffprobe in a worker thread; uploads go through
the shared WebAPIClient.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional
import asyncio
import json
import logging
import re

import httpx
from pydantic import Field

from api.client import UploadFile
from core.errors import APIError, BolideError, CommandError, ValidationError
from core.gate import ToolGroup, tool_flag_name
from infra.workspace import get_gifs_path, get_screencasts_path

from .registry import ToolDescriptor, ToolParams

if TYPE_CHECKING:
    from .catalog import ToolContext

logger = logging.getLogger("bolide.tools.content_generators")

ANALYZE_ENDPOINT = "/tools/analyze-videos"
ENHANCE_ENDPOINT = "/tools/enhance-audio"

MAX_GIF_FRAME_RATE = 30.0
CHUNK_SECONDS = 300.0
BUNDLE_SWITCH = tool_flag_name("content_generators")


class AnalyzeScreencastsParams(ToolParams):
    screencastNames: List[str] = Field(description="Names of the screencast files to analyze")
    force: bool = Field(description="Whether to force the analysis even if the analysis file already exists")
    customPrompt: Optional[str] = Field(
        default=None,
        description="Optional custom prompt for video analysis. If not provided, uses the default "
                    "comprehensive analysis prompt.",
    )


class GenerateGifParams(ToolParams):
    screencastName: str = Field(description="Name of the screencast file to convert to GIF")
    startTime: str = Field(description="Start timestamp in format HH:MM:SS or MM:SS")
    endTime: str = Field(description="End timestamp in format HH:MM:SS or MM:SS")


class EnhanceAudioParams(ToolParams):
    screencastNames: List[str] = Field(description="Names of the screencast files to extract audio from")


def analysis_file_name(screencast_name: str, file_suffix: Optional[str] = None) -> str:
    stem = Path(screencast_name).stem
    if file_suffix:
        return f"{stem}_{re.sub(r'[^a-zA-Z0-9-]', '-', file_suffix).lower()}.json"
    return f"{stem}.json"


def gif_file_name(screencast_name: str, start_time: str, end_time: str) -> str:
    stem = Path(screencast_name).stem
    return f"{stem}_{start_time.replace(':', '-')}_to_{end_time.replace(':', '-')}.gif"


def parse_frame_rate(fraction: str) -> float:
    """ffprobe r_frame_rate such as ``30000/1001`` or ``25``."""
    numerator, _, denominator = str(fraction).partition("/")
    value = float(numerator)
    if denominator and float(denominator):
        value /= float(denominator)
    return value


def find_stream(streams: List[Dict[str, Any]], codec_type: str) -> Optional[Dict[str, Any]]:
    return next((s for s in streams if s.get("codec_type") == codec_type), None)


# -----------------------------------------------------------------------------
# analyze_screencasts
# -----------------------------------------------------------------------------

async def analyze_screencasts(ctx: "ToolContext", params: AnalyzeScreencastsParams) -> Dict[str, Any]:
    logger.info(f"Analyzing screencasts: {', '.join(params.screencastNames)}")
    if params.customPrompt:
        logger.info(f"Using custom prompt for analysis: {params.customPrompt}")

    screencasts_path = get_screencasts_path(ctx.config)
    results: List[Dict[str, Any]] = []
    pending = list(params.screencastNames)

    if not params.force:
        pending = []
        for name in params.screencastNames:
            json_path = screencasts_path / analysis_file_name(name)
            if json_path.exists():
                logger.info(f"Analysis file already exists for {name}, skipping analysis")
                analysis = json.loads(json_path.read_text(encoding="utf-8"))
                results.append({**analysis, "analysis_file": str(json_path), "existing_analysis": True})
            else:
                pending.append(name)

        if not pending:
            logger.info("All screencasts have existing analyses, returning existing results")

    if pending:
        results.extend(await _request_analyses(ctx, screencasts_path, pending, params))

    has_existing = any(item.get("existing_analysis") for item in results)
    next_steps = [
        "Review the generated descriptions for each screencast",
        "Use the descriptions for content creation or documentation",
    ]
    if has_existing:
        next_steps.append("Some screencasts already have analyses, ask user if they want to force the analysis again")

    return {
        "success": True,
        "message": "Successfully analyzed screencasts via web API",
        "analyses": results,
        "existing_analyses": (
            "Some screencasts already have analyses, use the force parameter to force the analysis again"
            if has_existing
            else "All specified screencasts have new analyses"
        ),
        "integration": "web-api",
        "nextSteps": next_steps,
    }


async def _request_analyses(
    ctx: "ToolContext",
    screencasts_path: Path,
    names: List[str],
    params: AnalyzeScreencastsParams,
) -> List[Dict[str, Any]]:
    uploads = []
    for name in names:
        path = screencasts_path / name
        if not path.exists():
            raise ValidationError(f"Screencast file not found: {path}", param_name="screencastNames")
        uploads.append(UploadFile(field="video_files[]", path=path, content_type="video/mp4"))

    form: Dict[str, str] = {}
    if params.force:
        form["force"] = "true"
    if params.customPrompt:
        form["custom_prompt"] = params.customPrompt

    data = await ctx.api.post_files(
        ANALYZE_ENDPOINT,
        uploads,
        purpose="screencast analysis via web API",
        data=form,
        validation_message="Screencast file validation failed. Please check the file format and size.",
    )

    analyses = data.get("analyses")
    if not isinstance(analyses, list):
        raise APIError("Invalid response format from web API")
    logger.info(f"Successfully received {len(analyses)} screencast analyses from web API")

    saved = []
    for analysis in analyses:
        saved.append(_save_analysis(screencasts_path, analysis))
    return saved


def _save_analysis(screencasts_path: Path, analysis: Dict[str, Any]) -> Dict[str, Any]:
    screencast_name = analysis.get("screencastName") or analysis.get("videoName") or "screencast"
    file_suffix = analysis.get("fileSuffix")
    json_path = screencasts_path / analysis_file_name(screencast_name, file_suffix)

    updated = dict(analysis)
    if file_suffix:
        logger.info(f"Using custom file suffix: {file_suffix} for {screencast_name}")
        updated["result"] = updated.pop("description", None)
    updated.pop("videoName", None)
    updated.pop("fileSuffix", None)

    try:
        json_path.write_text(json.dumps(updated, indent=2), encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to save analysis for {screencast_name}: {e}")
        return {**analysis, "screencastName": screencast_name, "analysis_file": "", "existing_analysis": False}

    logger.info(f"Saved analysis for {screencast_name} to {json_path}")
    return {**updated, "analysis_file": str(json_path), "existing_analysis": False}


# -----------------------------------------------------------------------------
# generate_gif
# -----------------------------------------------------------------------------

def generate_gif(ctx: "ToolContext", params: GenerateGifParams) -> Dict[str, Any]:
    logger.info(
        f"Generating GIF from screencast {params.screencastName} from {params.startTime} to {params.endTime}"
    )
    screencast_path = get_screencasts_path(ctx.config) / params.screencastName
    gifs_path = get_gifs_path(ctx.config)

    if not screencast_path.exists():
        raise ValidationError(f"Screencast file not found: {screencast_path}", param_name="screencastName")

    if not gifs_path.exists():
        gifs_path.mkdir(parents=True)
        logger.info(f"Created gifs directory: {gifs_path}")

    gif_name = gif_file_name(params.screencastName, params.startTime, params.endTime)
    gif_path = gifs_path / gif_name
    palette_path = Path(f"{gif_path}.palette.png")

    video = find_stream(ctx.runner.probe_streams(str(screencast_path)), "video")
    if video is None:
        raise CommandError("No video stream found in the file")

    width, height = video.get("width"), video.get("height")
    original_rate = parse_frame_rate(video.get("r_frame_rate", "0"))
    fps = f"{min(original_rate, MAX_GIF_FRAME_RATE):g}"
    logger.info(f"Screencast properties - Width: {width}, Height: {height}, Original Frame Rate: {original_rate} fps")
    logger.info(f"GIF will be generated at {fps} fps (capped at {MAX_GIF_FRAME_RATE:g} fps)")

    scale = f"fps={fps},scale={width}:{height}:flags=lanczos"
    try:
        ctx.runner.check(
            ["ffmpeg", "-ss", params.startTime, "-to", params.endTime, "-i", str(screencast_path),
             "-vf", f"{scale},palettegen", "-y", str(palette_path)],
            log_prefix="Generate palette",
        )
        ctx.runner.check(
            ["ffmpeg", "-ss", params.startTime, "-to", params.endTime, "-i", str(screencast_path),
             "-i", str(palette_path), "-lavfi", f"{scale}[x];[x][1:v]paletteuse", "-y", str(gif_path)],
            log_prefix="Generate GIF",
        )
    finally:
        palette_path.unlink(missing_ok=True)

    if not gif_path.exists():
        raise CommandError("GIF file was not created successfully")

    logger.info(f"Successfully created GIF: {gif_path} ({width}x{height}, {fps} fps)")
    return {
        "success": True,
        "message": "Successfully generated GIF",
        "gifName": gif_name,
        "nextSteps": ["Ask the user if they want to refine the GIF"],
    }


# -----------------------------------------------------------------------------
# enhance_audio
# -----------------------------------------------------------------------------

async def enhance_audio_file(ctx: "ToolContext", audio_path: Path) -> Path:
    """Send one MP3 through the speech enhancement endpoint and download the result."""
    enhanced_path = audio_path.with_name(f"{audio_path.stem}_enhanced.mp3")
    logger.info(f"Enhancing audio {audio_path} via web API")

    data = await ctx.api.post_files(
        ENHANCE_ENDPOINT,
        [UploadFile(field="audio_file", path=audio_path, content_type="audio/mpeg")],
        purpose="audio enhancement",
        validation_message="Audio file validation failed. Please check the file format and size.",
    )

    download_url = data.get("download_url")
    if not download_url:
        raise APIError("Audio enhancement failed: response has no download_url")

    await ctx.api.download(download_url, enhanced_path, purpose="enhanced audio file")
    logger.info(f"Successfully enhanced audio: {enhanced_path}")
    if data.get("url_expires_in") is not None:
        logger.debug(f"Temporary URL expires in: {data['url_expires_in']}")
    return enhanced_path


async def _run(ctx: "ToolContext", args: List[str], log_prefix: str) -> None:
    await asyncio.to_thread(ctx.runner.check, args, log_prefix)


async def _enhance_one(
    ctx: "ToolContext",
    screencast_path: Path,
    temp_files: List[Path],
    chunk_errors: List[str],
) -> str:
    """Enhance one screencast; returns the name of the new screencast."""
    directory = screencast_path.parent
    stem = screencast_path.stem
    audio_path = directory / f"{stem}.mp3"
    enhanced_audio_path = directory / f"{stem}_enhanced.mp3"

    streams = await asyncio.to_thread(ctx.runner.probe_streams, str(screencast_path))
    if find_stream(streams, "audio") is None:
        raise ValidationError(f"Screencast file {screencast_path.name} does not contain an audio track")

    logger.info(f"Extracting audio from {screencast_path.name} to {audio_path.name}")
    await _run(ctx, ["ffmpeg", "-i", str(screencast_path), "-vn", "-acodec", "mp3", "-ab", "192k",
                     "-ar", "44100", "-y", str(audio_path)], "Extract audio")
    if not audio_path.exists():
        raise CommandError("Audio file was not created successfully")
    temp_files.append(audio_path)

    total = await asyncio.to_thread(ctx.runner.probe_duration, str(audio_path))
    logger.info(f"Audio duration: {total} seconds")

    if total <= CHUNK_SECONDS:
        logger.info(f"Audio is {total}s, enhancing directly without chunking")
        try:
            enhanced_audio_path = await enhance_audio_file(ctx, audio_path)
        except BolideError as e:
            chunk_errors.append(e.message)
            raise
    else:
        logger.info(f"Audio is {total}s, splitting into {CHUNK_SECONDS:g}s chunks")
        enhanced_chunks = []
        start, index = 0.0, 0
        while start < total:
            length = min(CHUNK_SECONDS, total - start)
            chunk_path = directory / f"{stem}_chunk_{index}.mp3"
            await _run(ctx, ["ffmpeg", "-i", str(audio_path), "-ss", f"{start:g}", "-t", f"{length:g}",
                             "-acodec", "copy", "-y", str(chunk_path)], f"Extract chunk {index}")
            if not chunk_path.exists():
                raise CommandError(f"Chunk file was not created successfully: {chunk_path}")
            temp_files.append(chunk_path)

            try:
                enhanced_chunk = await enhance_audio_file(ctx, chunk_path)
            except BolideError as e:
                chunk_errors.append(e.message)
                raise CommandError(f"Failed to enhance chunk {index}: {e.message}") from e
            enhanced_chunks.append(enhanced_chunk)
            temp_files.append(enhanced_chunk)

            start += CHUNK_SECONDS
            index += 1

        concat_path = directory / f"{stem}_concat.txt"
        concat_path.write_text("\n".join(f"file '{chunk}'" for chunk in enhanced_chunks), encoding="utf-8")
        temp_files.append(concat_path)

        logger.info(f"Merging {len(enhanced_chunks)} enhanced chunks into final audio")
        await _run(ctx, ["ffmpeg", "-f", "concat", "-safe", "0", "-i", str(concat_path),
                         "-c", "copy", "-y", str(enhanced_audio_path)], "Merge chunks")
        if not enhanced_audio_path.exists():
            raise CommandError("Enhanced merged audio file was not created successfully")

    temp_files.append(enhanced_audio_path)

    enhanced_name = f"{stem}_enhanced_audio{screencast_path.suffix or '.mp4'}"
    enhanced_screencast = directory / enhanced_name
    logger.info(f"Creating enhanced screencast {enhanced_name} with enhanced audio")
    await _run(ctx, ["ffmpeg", "-i", str(screencast_path), "-i", str(enhanced_audio_path),
                     "-c:v", "copy", "-c:a", "aac", "-map", "0:v:0", "-map", "1:a:0", "-shortest",
                     "-y", str(enhanced_screencast)], "Combine audio")
    if not enhanced_screencast.exists():
        raise CommandError("Enhanced screencast file was not created successfully")

    logger.info(f"Successfully created enhanced screencast: {enhanced_screencast}")
    return enhanced_name


async def enhance_audio(ctx: "ToolContext", params: EnhanceAudioParams) -> Dict[str, Any]:
    logger.info(f"Extracting and enhancing audio from screencasts: {', '.join(params.screencastNames)}")
    screencasts_path = get_screencasts_path(ctx.config)

    results: List[Dict[str, Any]] = []
    temp_files: List[Path] = []

    try:
        for name in params.screencastNames:
            screencast_path = screencasts_path / name
            if not screencast_path.exists():
                logger.warning(f"Screencast file not found: {screencast_path}, skipping")
                continue

            chunk_errors: List[str] = []
            try:
                enhanced_name = await _enhance_one(ctx, screencast_path, temp_files, chunk_errors)
            except (BolideError, OSError, httpx.HTTPError) as e:
                message = e.message if isinstance(e, BolideError) else (str(e) or e.__class__.__name__)
                logger.error(f"Failed to enhance audio for {name}: {message}")
                errors = [message] + [err for err in chunk_errors if err != message]
                results.append({"screencastName": name, "success": False, "errors": errors})
                continue

            results.append({"screencastName": enhanced_name, "success": True, "errors": []})
    finally:
        _cleanup(temp_files)

    failed = [r for r in results if not r["success"]]
    if failed:
        logger.error(f"{len(failed)} screencasts failed to be enhanced. See the errors for details.")
    else:
        logger.info("Successfully created enhanced screencast files for all screencasts")

    return {
        "success": all(r["success"] for r in results),
        "result": results,
        "nextSteps": [
            "Review the enhanced screencast files with improved speech quality",
            "Use the enhanced screencasts for content creation or analysis",
            "Compare the enhanced screencasts with the original versions",
        ],
    }


def _cleanup(paths: List[Path]) -> None:
    logger.info("Cleaning up temporary files")
    for path in dict.fromkeys(paths):
        try:
            if path.exists():
                path.unlink()
                logger.info(f"Removed temporary file: {path}")
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {path}: {e}")


def descriptors(ctx: "ToolContext") -> List[ToolDescriptor]:
    groups = frozenset({ToolGroup.CONTENT_GENERATORS})

    async def analyze(params: AnalyzeScreencastsParams) -> Dict[str, Any]:
        return await analyze_screencasts(ctx, params)

    async def enhance(params: EnhanceAudioParams) -> Dict[str, Any]:
        return await enhance_audio(ctx, params)

    return [
        ToolDescriptor(
            name="analyze_screencasts",
            description=(
                "Analyzes screencasts using Gemini API via the web API integration. IMPORTANT: You MUST "
                "provide the screencastNames and force parameters. Optionally provide customPrompt for "
                "specialized analysis. DO NOT MODIFY THE CUSTOM PROMPT, NEVER ASK FOR VISUAL ANALYSIS "
                "UNLESS USER EXPLICITLY ASKS FOR IT, USE WHAT THE USER ASKED FOR AS CUSTOM PROMPT. "
                "Example: analyze_screencasts({ screencastNames: ['screencast1.mp4', 'screencast2.mp4'], "
                "force: false, customPrompt: 'Focus on user interface errors and bugs' })"
            ),
            handler=analyze,
            parameter_schema=AnalyzeScreencastsParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
        ToolDescriptor(
            name="generate_gif",
            description=(
                "Generates a GIF from a screencast. IMPORTANT: You MUST provide the screencastName, "
                "startTime, and endTime parameters. Example: generate_gif({ screencastName: "
                "'NAME_OF_SCREENCAST_FILE', startTime: '00:00:00', endTime: '00:00:00' })"
            ),
            handler=lambda params: generate_gif(ctx, params),
            parameter_schema=GenerateGifParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
        ToolDescriptor(
            name="enhance_audio",
            description=(
                "Extracts audio from screencasts using ffmpeg and saves as MP3 files in the same "
                "directory. Automatically enhances audio using the web API speech-to-speech conversion. "
                "Requires BOLIDEAI_API_TOKEN and optionally BOLIDEAI_API_URL environment variables. "
                "IMPORTANT: You MUST provide the screencastNames parameters. Example: "
                "enhance_audio({ screencastNames: ['screencast1.mp4', 'screencast2.mp4'] })"
            ),
            handler=enhance,
            parameter_schema=EnhanceAudioParams,
            groups=groups,
            bundle_flag=BUNDLE_SWITCH,
        ),
    ]
