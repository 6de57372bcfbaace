#!/usr/bin/env python3
"""
FuzzHawk - Web Content Discovery Fuzzer

Main entry point for the application.
"""

import asyncio
import logging
import click

from fuzzhawk import __version__, configure_logging
from fuzzhawk.config import get_config
from fuzzhawk.scanner.core.engine import FuzzEngine, FuzzConfig
from fuzzhawk.scanner.core.output import format_header, format_row
from fuzzhawk.scanner.core.requester import RequestMethod
from fuzzhawk.scanner.core.wordlist import load_wordlist
from fuzzhawk.scanner.errors import (
    ConfigurationError, InvalidPatternError, RequestBuildError, RequestError,
    StreamReadError, TemplateError, WordlistError
)

# Exit codes
MISSING_WORDLIST = 1
MISSING_URL = 2
MISSING_FUZZ = 3
FILE_NOT_EXISTS = 4
ERR_CREATE_HTTP_REQ = 5
ERR_SEND_HTTP_REQ = 6
ERR_READ_HTTP_RESP = 7
INVALID_REGEX = 8
INVALID_OPTIONS = 9

logger = logging.getLogger('fuzzhawk')
settings = get_config()


def parse_headers(values):
    """Turn repeated ``Name: value`` options into a dict."""
    headers = {}
    for raw in values:
        name, sep, value = raw.partition(':')
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected 'Name: value', got {raw!r}", param_hint='--header')
        headers[name.strip()] = value.strip()
    return headers


@click.group()
@click.version_option(version=__version__, prog_name='FuzzHawk')
def cli():
    """FuzzHawk - Web Content Discovery Fuzzer"""
    pass


@cli.command()
@click.option('--wordlist', '-w', default=settings.WORDLIST, show_default=True,
              help='Wordlist to use for fuzzing')
@click.option('--url', '-u', default='',
              help='URL with FUZZ keyword. Example: http://example.com/FUZZ')
@click.option('--method', '-X', default=settings.HTTP_METHOD, show_default=True,
              type=click.Choice([m.value for m in RequestMethod], case_sensitive=False),
              help='HTTP method')
@click.option('--exclude-size', type=int, default=-1,
              help='Exclude HTTP responses with this size')
@click.option('--exclude-lines', type=int, default=-1,
              help='Exclude HTTP responses with this num. of lines')
@click.option('--exclude-regex', default='',
              help='Exclude HTTP responses including this regex (max. match width: half the window)')
@click.option('--keyword', default=settings.FUZZ_KEYWORD, show_default=True,
              help='Placeholder replaced by each word')
@click.option('--chunk-size', type=int, default=settings.CHUNK_SIZE, show_default=True,
              help='Bytes read from the response per operation')
@click.option('--window-size', type=int, default=settings.WINDOW_SIZE, show_default=True,
              help='Seam window size for regex matches across chunk boundaries')
@click.option('--timeout', type=float, default=settings.TIMEOUT, show_default=True,
              help='Connect/read timeout in seconds')
@click.option('--delay', type=float, default=settings.DELAY_BETWEEN_REQUESTS, show_default=True,
              help='Delay between requests in seconds')
@click.option('--retries', type=int, default=settings.MAX_RETRIES, show_default=True,
              help='Attempts per request before giving up')
@click.option('--insecure', '-k', is_flag=True, help='Do not verify SSL certificates')
@click.option('--header', '-H', multiple=True, help="Extra request header, 'Name: value'")
@click.option('--proxy', help='Proxy URL')
@click.option('--stop-on-error', is_flag=True, help='Abort on the first request or read error')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def fuzz(ctx, wordlist, url, method, exclude_size, exclude_lines, exclude_regex, keyword,
         chunk_size, window_size, timeout, delay, retries, insecure, header, proxy,
         stop_on_error, verbose):
    """Fuzz a URL template with every word of a wordlist."""
    configure_logging('DEBUG' if verbose else settings.LOG_LEVEL)

    if not wordlist:
        logger.warning("Missing wordlist")
        click.echo(ctx.get_help(), err=True)
        ctx.exit(MISSING_WORDLIST)

    if not url:
        logger.warning("Missing URL")
        click.echo(ctx.get_help(), err=True)
        ctx.exit(MISSING_URL)

    config = FuzzConfig(
        url=url,
        wordlist=wordlist,
        method=method,
        keyword=keyword,
        exclude_size=exclude_size,
        exclude_lines=exclude_lines,
        exclude_regex=exclude_regex,
        chunk_size=chunk_size,
        window_capacity=window_size,
        timeout=timeout,
        delay=delay,
        max_retries=retries,
        verify_ssl=settings.VERIFY_SSL and not insecure,
        custom_headers=parse_headers(header),
        proxy=proxy,
        user_agent=settings.USER_AGENT,
        stop_on_error=stop_on_error
    )

    engine = FuzzEngine(
        config,
        logger=logger,
        result_callback=lambda result: click.echo(format_row(result))
    )

    try:
        engine.prepare()
    except TemplateError as e:
        logger.warning(str(e))
        ctx.exit(MISSING_FUZZ)
    except InvalidPatternError as e:
        logger.error(str(e))
        ctx.exit(INVALID_REGEX)
    except ConfigurationError as e:
        logger.error(str(e))
        ctx.exit(INVALID_OPTIONS)

    try:
        words = load_wordlist(wordlist)
    except WordlistError as e:
        logger.error(str(e))
        ctx.exit(FILE_NOT_EXISTS)

    click.echo(format_header())

    try:
        summary = asyncio.run(engine.run(words))
    except RequestBuildError as e:
        logger.error(f"Failed to create HTTP request: {e}")
        ctx.exit(ERR_CREATE_HTTP_REQ)
    except RequestError as e:
        logger.error(f"Failed to send HTTP request: {e}")
        ctx.exit(ERR_SEND_HTTP_REQ)
    except StreamReadError as e:
        logger.error(str(e))
        ctx.exit(ERR_READ_HTTP_RESP)

    stats = summary['statistics']
    logger.info(
        f"Done in {summary['duration']:.2f}s: {stats['requests_sent']} requests, "
        f"{stats['shown']} shown, {stats['excluded']} excluded, {stats['failed']} failed"
    )


@cli.command()
@click.option('--host', default='127.0.0.1', help='Host to bind to')
@click.option('--port', default=5001, help='Port to bind to')
def demo(host, port):
    """Start the demo application for trying the fuzzer."""
    from aiohttp import web
    from tests.demo_app import create_demo_app

    click.echo("Starting demo application...")
    click.echo(f"Try: python run.py fuzz -u http://{host}:{port}/FUZZ -w <wordlist>")

    web.run_app(create_demo_app(), host=host, port=port)


if __name__ == '__main__':
    cli()
