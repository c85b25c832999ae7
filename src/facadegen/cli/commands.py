"""
Click command definitions for the facadegen CLI.

Each command maps onto one GenerationClient operation. Images are read from
files and sent as data URLs; generated images are written to files whose paths
are echoed on stdout.
"""

import dataclasses
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from facadegen import (
    Config,
    DetailedRequest,
    GenerationClient,
    Logo,
    ValidationError,
    __version__,
    image_file_to_data_url,
    parse_data_url,
)
from facadegen.cli import progress
from facadegen.cli.handlers import run_with_error_handling
from facadegen.cli.utils import default_output_path, plan_path_for
from facadegen.core.data_url import extension_for_mime, write_data_url
from facadegen.logging_config import configure_logging, get_verbosity_from_env

T = TypeVar("T")

_IMAGE_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)
_OUT_PATH = click.Path(dir_okay=False, path_type=Path)


def _client_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command: credential, logging and debug flags."""
    fn = click.option(
        "--debug-api",
        is_flag=True,
        help="Log raw API request payload and response (image data truncated).",
    )(fn)
    fn = click.option(
        "--verbose",
        "-v",
        "verbose_count",
        count=True,
        help="Increase verbosity: -v also show prompts, -vv show request detail.",
    )(fn)
    fn = click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimize progress messages; only print results or errors.",
    )(fn)
    fn = click.option(
        "--api-key",
        envvar="GEMINI_API_KEY",
        help="Gemini API key (overrides GEMINI_API_KEY environment variable).",
    )(fn)
    return fn


def _build_client(api_key: str | None, debug_api: bool) -> GenerationClient:
    """Load config from the environment, apply CLI overrides, validate, build the client."""
    config = Config.from_env()
    overrides: dict[str, Any] = {}
    if api_key:
        overrides["gemini_api_key"] = api_key
    if debug_api:
        overrides["debug_api"] = True
    if overrides:
        config = dataclasses.replace(config, **overrides)
    config.validate()
    return GenerationClient.from_config(config)


def _call(quiet: bool, description: str, model: str, fn: Callable[[], T]) -> T:
    """Run fn under a spinner unless quiet."""
    if quiet:
        return fn()
    with progress.operation_progress(description, model=model):
        return fn()


def _run(quiet: bool, verbose_count: int, body: Callable[[], None]) -> None:
    # CLI flags override FACADEGEN_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)
    run_with_error_handling(body, quiet=quiet)


def _save_image(data_url: str, out: Path | None, kind: str) -> Path:
    """Write a data URL's payload to out (or a timestamped default path)."""
    mime, _payload = parse_data_url(data_url)
    out_path = out or default_output_path(kind, extension_for_mime(mime))
    out_path.parent.mkdir(parents=True, exist_ok=True)
    return write_data_url(data_url, out_path)


def _load_request(
    request_file: Path | None,
    logo: Path | None,
    banner_art: Path | None,
    pattern: Path | None,
) -> DetailedRequest:
    """Build a DetailedRequest from an optional JSON file plus attachment flags."""
    raw: dict[str, Any] = {}
    if request_file is not None:
        try:
            raw = json.loads(request_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Request file is not valid JSON: {e}", field="request") from e
        if not isinstance(raw, dict):
            raise ValidationError("Request file must contain a JSON object.", field="request")
    if logo is not None:
        raw["logo_file"] = {"data_url": image_file_to_data_url(logo), "prompt": logo.stem}
    if banner_art is not None:
        banner = dict(raw.pop("bannerFaixaDetails", None) or raw.get("banner") or {})
        banner["art_file"] = image_file_to_data_url(banner_art)
        raw["banner"] = banner
    if pattern is not None:
        stickers = list(raw.pop("stickerDetails", None) or raw.get("stickers") or [])
        stickers.insert(
            0,
            {
                "type": "pattern",
                "generated_pattern": {
                    "data_url": image_file_to_data_url(pattern),
                    "prompt": pattern.stem,
                },
            },
        )
        raw["stickers"] = stickers
    return DetailedRequest.from_dict(raw)


@click.group(
    help=f"""AI facade and sign redesign (Gemini + Imagen).

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="facadegen")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@click.option("--image", "-i", type=_IMAGE_PATH, required=True, help="Facade photo.")
@click.option("--prompt", "-p", required=True, help="Redesign instructions.")
@click.option("--logo", type=_IMAGE_PATH, help="Logo image to place on the facade.")
@click.option("--banner-art", type=_IMAGE_PATH, help="Artwork for a banner.")
@click.option("--pattern", type=_IMAGE_PATH, help="Previously generated pattern image.")
@click.option(
    "--request",
    "request_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with a detailed request (logo_file, banner, stickers).",
)
@click.option("--enhance", is_flag=True, help="Enhance the prompt before generating.")
@click.option("--out", "-o", type=_OUT_PATH, help="Output image path.")
@click.option("--plan-out", type=_OUT_PATH, help="Technical plan JSON path.")
@_client_options
def redesign(
    image: Path,
    prompt: str,
    logo: Path | None,
    banner_art: Path | None,
    pattern: Path | None,
    request_file: Path | None,
    enhance: bool,
    out: Path | None,
    plan_out: Path | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate a redesigned facade image and its technical plan."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        request_data = _load_request(request_file, logo, banner_art, pattern)
        original = image_file_to_data_url(image)

        effective_prompt = prompt
        if enhance:
            effective_prompt = _call(
                quiet,
                "Enhancing prompt",
                client.config.text_model,
                lambda: client.enhance_prompt(prompt),
            )

        result = _call(
            quiet,
            "Generating redesign",
            client.config.multimodal_model,
            lambda: client.generate_redesign(original, effective_prompt, request_data),
        )

        image_path = _save_image(result.redesigned_image, out, "redesign")
        plan_path = plan_out or plan_path_for(image_path)
        plan_path.write_text(
            json.dumps([item.model_dump() for item in result.technical_plan], indent=2),
            encoding="utf-8",
        )
        if not quiet:
            progress.print_redesign_result(
                image_path, plan_path, result.technical_plan, effective_prompt
            )
        click.echo(str(image_path))
        click.echo(str(plan_path))

    _run(quiet, verbose_count, body)


@cli.command()
@click.option("--prompt", "-p", required=True, help="Redesign request to enhance.")
@_client_options
def enhance(
    prompt: str,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Rewrite a request as a detailed, technical prompt (falls back to the input)."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        enhanced = _call(
            quiet,
            "Enhancing prompt",
            client.config.text_model,
            lambda: client.enhance_prompt(prompt),
        )
        if enhanced == prompt and not quiet:
            progress.print_warning("Prompt was returned unchanged.")
        click.echo(enhanced)

    _run(quiet, verbose_count, body)


@cli.command()
@click.option("--image", "-i", type=_IMAGE_PATH, required=True, help="Facade photo.")
@click.option("--placement", required=True, help="Rough placement, e.g. 'on the window'.")
@_client_options
def placement(
    image: Path,
    placement: str,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Refine a placement phrase into a precise location on the facade."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        original = image_file_to_data_url(image)
        refined = _call(
            quiet,
            "Refining placement",
            client.config.text_model,
            lambda: client.refine_placement_prompt(original, placement),
        )
        click.echo(refined)

    _run(quiet, verbose_count, body)


@cli.command()
@click.option("--prompt", "-p", required=True, help="Logo description.")
@click.option("--out", "-o", type=_OUT_PATH, help="Output image path.")
@_client_options
def logo(
    prompt: str,
    out: Path | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate a minimalist logo on a transparent background."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        result = _call(
            quiet,
            "Generating logo",
            client.config.image_model,
            lambda: client.generate_logo(prompt),
        )
        out_path = _save_image(result.data_url, out, "logo")
        if not quiet:
            progress.print_image_result("Logo Generated", out_path, result.prompt)
        click.echo(str(out_path))

    _run(quiet, verbose_count, body)


@cli.command("reinvent-logo")
@click.option("--image", "-i", type=_IMAGE_PATH, required=True, help="Storefront photo.")
@click.option("--company", "-c", required=True, help="Company name shown on the storefront.")
@click.option("--out", "-o", type=_OUT_PATH, help="Output image path.")
@_client_options
def reinvent_logo(
    image: Path,
    company: str,
    out: Path | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Modernize the logo found in a storefront photo."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        original = image_file_to_data_url(image)
        result = _call(
            quiet,
            "Reinventing logo",
            client.config.multimodal_model,
            lambda: client.reinvent_logo(original, company),
        )
        out_path = _save_image(result.data_url, out, "logo")
        if not quiet:
            progress.print_image_result("Logo Reinvented", out_path, result.prompt)
        click.echo(str(out_path))

    _run(quiet, verbose_count, body)


@cli.command()
@click.option("--prompt", "-p", required=True, help="Pattern theme.")
@click.option("--out", "-o", type=_OUT_PATH, help="Output image path.")
@_client_options
def pattern(
    prompt: str,
    out: Path | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate a seamless, tileable decorative pattern."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        result = _call(
            quiet,
            "Generating pattern",
            client.config.image_model,
            lambda: client.generate_pattern(prompt),
        )
        out_path = _save_image(result.data_url, out, "pattern")
        if not quiet:
            progress.print_image_result("Pattern Generated", out_path, result.prompt)
        click.echo(str(out_path))

    _run(quiet, verbose_count, body)


@cli.command()
@click.option(
    "--image", "-i", type=_IMAGE_PATH, required=True, help="Facade photo (fallback cover)."
)
@click.option("--prompt", "-p", required=True, help="Redesign concept for the color palette.")
@click.option("--company", "-c", default="", help="Company name.")
@click.option("--logo", "logo_path", type=_IMAGE_PATH, help="Logo used in the presentation.")
@click.option("--out", "-o", type=_OUT_PATH, help="Output image path.")
@_client_options
def cover(
    image: Path,
    prompt: str,
    company: str,
    logo_path: Path | None,
    out: Path | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate an abstract 16:9 presentation cover (falls back to the facade photo)."""

    def body() -> None:
        client = _build_client(api_key, debug_api)
        original = image_file_to_data_url(image)
        logo_value = (
            Logo(data_url=image_file_to_data_url(logo_path), prompt=logo_path.stem)
            if logo_path is not None
            else None
        )
        result = _call(
            quiet,
            "Generating cover",
            client.config.image_model,
            lambda: client.generate_pdf_cover_image(logo_value, company, prompt, original),
        )
        if result == original and not quiet:
            progress.print_warning("Cover generation failed; using the facade photo.")
        out_path = _save_image(result, out, "cover")
        if not quiet:
            progress.print_image_result("Cover Generated", out_path, prompt)
        click.echo(str(out_path))

    _run(quiet, verbose_count, body)


def main() -> None:
    """Entry point for the facadegen console script."""
    cli()


__all__ = [
    "cli",
    "main",
    "redesign",
    "enhance",
    "placement",
    "logo",
    "reinvent_logo",
    "pattern",
    "cover",
]
