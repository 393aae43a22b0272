#!/usr/bin/env python3
"""
jglossurl CLI - convert between target URLs and JGloss-WWW forwarding URLs.

Usage:
    jglossurl <url>                        # Forwarding URL for <url> (simplest)
    jglossurl compose URL [options]        # Compose with options
    jglossurl decompose FORWARDING_URL     # Back to the target URL

Examples:
    jglossurl "http://x.com/a"
    jglossurl compose "http://x.com/a" --servlet http://proxy/svc --cookies
    jglossurl decompose "http://proxy/svc/10/http_3a_2f_2fx.com_2fa"
"""

import json
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table
from rich.text import Text

from jglossurl import __version__
from jglossurl.codec import escape_url, unescape_url
from jglossurl.config import JGlossURLConfig, generate_example_config, get_preset, PRESETS
from jglossurl.forwarding import (
    base_to_jgloss,
    jgloss_to_base,
    parse_encoded_path,
    to_jgloss_url,
)
from jglossurl.html_links import rewrite_links
from jglossurl.log import setup_logging
from jglossurl.policy import ForwardingRejected
from jglossurl.rewriter import URLRewriter

console = Console()
logger = logging.getLogger(__name__)


def load_config(config_file: str | None, preset: str | None) -> JGlossURLConfig:
    """Config from --config, else --preset, else the default location."""
    if config_file:
        logger.debug("Loading config from %s", config_file)
        return JGlossURLConfig.from_file(config_file)
    if preset:
        return get_preset(preset)
    return JGlossURLConfig.load_user_config()


def emit(text: str):
    """Print a result string without markup, highlighting or wrapping."""
    console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def emit_json(data):
    click.echo(json.dumps(data))


def fail(message: str):
    console.print(f"[red]Error: {escape_markup(message)}[/]", highlight=False)
    sys.exit(1)


def flag(value: bool) -> str:
    return "[green]yes[/]" if value else "[dim]no[/]"


def compose_url(config: JGlossURLConfig, url: str, servlet: str | None, page: str | None,
                cookies: bool | None, form_data: bool | None) -> str:
    """Forwarding URL for url, filling unset options from the config."""
    if cookies is None:
        cookies = config.forwarding.forward_cookies
    if form_data is None:
        form_data = config.forwarding.forward_form_data

    if page:
        return base_to_jgloss(url, page, cookies, form_data, config.servlet.servlet_name)
    return to_jgloss_url(url, servlet or config.servlet.servlet_url, cookies, form_data)


# ============================================================================
# Direct composing (jglossurl <url>)
# ============================================================================

@click.command()
@click.argument("url")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def compose_direct(url, verbose):
    """Print the forwarding URL for URL."""
    setup_logging(verbose)
    try:
        config = JGlossURLConfig.load_user_config()
    except ValueError as e:
        fail(f"Invalid config: {e}")

    try:
        emit(compose_url(config, url, None, None, None, None))
    except ValueError as e:
        fail(str(e))


# ============================================================================
# CLI Group (subcommands)
# ============================================================================

@click.group()
@click.version_option(version=__version__)
@click.option("-c", "--config", "config_file", type=click.Path(exists=True, dir_okay=False),
              help="JSON config file")
@click.option("--preset", type=click.Choice(sorted(PRESETS)), help="Use a preset configuration")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config_file, preset, as_json, verbose):
    """jglossurl - JGloss-WWW forwarding URL tool.

    Simply run: jglossurl <url> to get its forwarding URL.

    Or use subcommands: compose, decompose, escape, unescape, parse-path,
    rewrite, check
    """
    setup_logging(verbose)
    try:
        config = load_config(config_file, preset)
    except ValueError as e:
        fail(f"Invalid config: {e}")
    if as_json:
        config.output.json = True
    if verbose:
        config.output.verbose = True
    elif config.output.verbose:
        setup_logging(True)
    if not config.output.color:
        console.no_color = True

    ctx.obj = config


@cli.command()
@click.argument("text")
@click.pass_obj
def escape(config, text):
    """Escape TEXT for use as a forwarding URL path segment."""
    try:
        escaped = escape_url(text)
    except ValueError as e:
        fail(str(e))

    if config.output.json:
        emit_json({"input": text, "escaped": escaped})
    else:
        emit(escaped)


@cli.command()
@click.argument("text")
@click.pass_obj
def unescape(config, text):
    """Undo escape on TEXT."""
    unescaped = unescape_url(text)
    if config.output.json:
        emit_json({"input": text, "unescaped": unescaped})
    else:
        emit(unescaped)


@cli.command()
@click.argument("url")
@click.option("-s", "--servlet", help="Servlet URL (default from config)")
@click.option("-p", "--page", help="Page URL; the servlet is assumed to live next to it")
@click.option("--cookies/--no-cookies", default=None, help="Ask the servlet to forward cookies")
@click.option("--form-data/--no-form-data", default=None, help="Ask the servlet to forward form data")
@click.pass_obj
def compose(config, url, servlet, page, cookies, form_data):
    """Build the forwarding URL for URL."""
    if servlet and page:
        fail("Use either --servlet or --page, not both")

    try:
        forwarding_url = compose_url(config, url, servlet, page, cookies, form_data)
    except ValueError as e:
        fail(str(e))

    if config.output.json:
        emit_json({"url": url, "forwarding_url": forwarding_url})
    else:
        emit(forwarding_url)


@cli.command()
@click.argument("forwarding_url")
@click.pass_obj
def decompose(config, forwarding_url):
    """Recover the target URL and flags from FORWARDING_URL."""
    result = jgloss_to_base(forwarding_url)
    if result.base_url is None:
        fail(f"Not a forwarding URL: {forwarding_url}")

    flags = result.flags
    if config.output.json:
        emit_json({
            "base_url": result.base_url,
            "forward_cookies": flags.forward_cookies if flags else None,
            "forward_form_data": flags.forward_form_data if flags else None,
        })
        return

    table = Table(title="Forwarding URL")
    table.add_column("Field", style="cyan")
    table.add_column("Value", overflow="fold")
    table.add_row("Base URL", Text(result.base_url))
    if flags:
        table.add_row("Forward cookies", flag(flags.forward_cookies))
        table.add_row("Forward form data", flag(flags.forward_form_data))
    else:
        table.add_row("Flags", "[yellow]none (URL too short)[/]")
    console.print(table)


@cli.command("parse-path")
@click.argument("path_info")
@click.pass_obj
def parse_path(config, path_info):
    """Decode servlet PATH_INFO such as '/10/http_3a_2f_2fx.com'."""
    request = parse_encoded_path(path_info)
    if request is None:
        fail(f"Malformed forwarding path: {path_info}")

    if config.output.json:
        emit_json({
            "url": request.url,
            "forward_cookies": request.forward_cookies,
            "forward_form_data": request.forward_form_data,
        })
    else:
        console.print("[cyan]URL:[/] ", end="")
        emit(request.url)
        console.print(f"[cyan]Forward cookies:[/] {flag(request.forward_cookies)}")
        console.print(f"[cyan]Forward form data:[/] {flag(request.forward_form_data)}")


@cli.command()
@click.argument("file", type=click.File("r"))
@click.option("-b", "--base", "document_base", required=True, help="URL the document was fetched from")
@click.option("-s", "--servlet", help="Servlet URL (default from config)")
@click.option("--cookies/--no-cookies", default=None, help="Set the cookie forwarding flag")
@click.option("--form-data/--no-form-data", default=None, help="Set the form data flag and rewrite forms")
@click.option("--parser", default="lxml", help="BeautifulSoup parser")
@click.pass_obj
def rewrite(config, file, document_base, servlet, cookies, form_data, parser):
    """Route the links of HTML FILE ('-' for stdin) through the servlet."""
    if cookies is None:
        cookies = config.forwarding.forward_cookies
    if form_data is None:
        form_data = config.forwarding.forward_form_data

    rewriter = URLRewriter(
        servlet or config.servlet.servlet_url,
        document_base,
        protocols=config.forwarding.allowed_protocols,
        allow_cookie_forwarding=cookies,
        allow_form_data_forwarding=form_data,
    )
    click.echo(rewrite_links(file.read(), rewriter, parser=parser))


@cli.command()
@click.argument("path_info")
@click.option("--secure", is_flag=True, help="The call came in over https")
@click.option("-q", "--query", help="Query string of the call")
@click.pass_obj
def check(config, path_info, secure, query):
    """Run the forwarding policy on servlet PATH_INFO."""
    request = parse_encoded_path(path_info)
    if request is None:
        fail(f"Malformed forwarding path: {path_info}")

    policy = config.forwarding_policy()
    policy.describe()

    try:
        decision = policy.resolve(request, config.servlet.servlet_path, secure_request=secure, query=query)
    except ForwardingRejected as e:
        if config.output.json:
            emit_json({"allowed": False, "status": e.status_code, "reason": e.message})
            sys.exit(1)
        fail(f"{e.status_code} {e.message}")

    if config.output.json:
        emit_json({
            "allowed": True,
            "url": decision.url,
            "protocol": decision.protocol,
            "forward_cookies": decision.forward_cookies,
            "forward_form_data": decision.forward_form_data,
        })
        return

    console.print("[bold green][+] Forwarding allowed[/]")
    console.print("  [cyan]URL:[/] ", end="")
    emit(decision.url)
    console.print(f"  [cyan]Forward cookies:[/] {flag(decision.forward_cookies)}")
    console.print(f"  [cyan]Forward form data:[/] {flag(decision.forward_form_data)}")


@cli.command("config")
@click.option("--example", is_flag=True, help="Print an example config instead of the active one")
@click.option("--save", "save_path", type=click.Path(dir_okay=False), help="Write the active config to a file")
@click.pass_obj
def show_config(config, example, save_path):
    """Show, save or generate configuration."""
    if example:
        click.echo(generate_example_config())
        return

    if save_path:
        config.save(save_path)
        console.print(f"[green]Config saved to {save_path}[/]")
        return

    click.echo(json.dumps(config.to_dict(), indent=2))


@cli.command()
def version():
    """Show version information."""
    console.print(f"jglossurl v{__version__}")


# ============================================================================
# Entry point
# ============================================================================

def main(args=None):
    """Console script entry point.

    A first argument that is neither an option nor a subcommand is taken as
    a URL, so ``jglossurl <url>`` composes with the configured defaults.
    """
    args = sys.argv[1:] if args is None else list(args)
    if args and not args[0].startswith("-") and args[0] not in cli.commands:
        return compose_direct.main(args, prog_name="jglossurl")
    return cli.main(args, prog_name="jglossurl")
