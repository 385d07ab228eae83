# === FILE: policy_scout/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point of PolicyScout.

Commands:
  discover URL        Find the privacy policy of one site
  batch URL...        Discover many sites and print/save a report
  scrape URL          Fetch and print the text of a policy page
  pages URL           List privacy/legal/about/support links of a homepage
  config              Show the effective configuration

Global options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --limit INT         Page budget of one crawl (overrides max_pages)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (console only when omitted)
  --log-format FORMAT Logging format string

batch options:
  --file PATH         Read sites from a file, one per line
  --json PATH         Save the JSON report
  --html PATH         Save the HTML report
  --template DIR      Directory with report.html.j2
  --pretty            Indent JSON output
  --timeout SEC       Abort the whole batch after SEC seconds

Also:
  --version, -v       Show the PolicyScout version

Example:
  policy-scout batch example.com example.org --json report.json --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from policy_scout import __version__
from policy_scout.aggregator import aggregate_results
from policy_scout.config import load_config
from policy_scout.engine import discover, discover_relevant_pages, discover_simple
from policy_scout.errors import AccessDeniedError, PolicyNotFoundError, ScrapeError
from policy_scout.logger import init_logging
from policy_scout.report.html_report import render_html
from policy_scout.report.json_report import render_json
from policy_scout.scheduler import batch_discover
from policy_scout.scraper import scrape
from policy_scout.utils import read_wordlist, remove_duplicates

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)

def echo_json(data, pretty: bool = True):
    click.echo(json.dumps(data, ensure_ascii=False, indent=2 if pretty else None))

@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PolicyScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML or JSON configuration file.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Page budget of one crawl (overrides max_pages)'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (console only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """PolicyScout: find and fetch website privacy policies."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load configuration: {e}')
    if limit is not None:
        cfg = cfg.model_copy(update={'max_pages': limit})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg

@cli.command('discover', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--simple', is_flag=True, help='Print only the policy URL')
@click.pass_context
def discover_command(ctx, url, simple):
    """Find the privacy policy of URL."""
    cfg = ctx.obj['config']
    try:
        if simple:
            policy_url = asyncio.run(discover_simple(url, cfg))
        else:
            result = asyncio.run(discover(url, cfg))
    except Exception as e:
        print_error(f'Discovery failed: {e}')

    if simple:
        if policy_url is None:
            print_error(f'No privacy policy found for {url}')
        click.echo(policy_url)
        return
    echo_json(result.as_dict())

@cli.command('batch', context_settings=CONTEXT_SETTINGS)
@click.argument('urls', nargs=-1)
@click.option(
    '--file', '-f', 'urls_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='File with one site per line (# starts a comment)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with report.html.j2 (packaged template when omitted)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output'
)
@click.option(
    '--timeout', 'batch_timeout',
    type=float,
    default=None,
    help='Abort the whole batch after this many seconds'
)
@click.pass_context
def batch(ctx, urls, urls_file, json_output, html_output, template_dir, pretty, batch_timeout):
    """Discover privacy policies of several sites."""
    cfg = ctx.obj['config']
    sites = list(urls)
    if urls_file:
        sites.extend(read_wordlist(urls_file))
    sites = remove_duplicates(sites)
    if not sites:
        print_error('No sites given: pass URLs or --file')

    try:
        if batch_timeout:
            results = asyncio.run(
                asyncio.wait_for(batch_discover(sites, config=cfg), timeout=batch_timeout)
            )
        else:
            results = asyncio.run(batch_discover(sites, config=cfg))
    except asyncio.TimeoutError:
        print_error(f'Batch did not finish within {batch_timeout} seconds')
    except Exception as e:
        print_error(f'Batch discovery failed: {e}')

    report = aggregate_results(results)

    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Failed to save HTML report: {e}')

@cli.command('scrape', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--strict', is_flag=True, help='Fail instead of returning partial content')
@click.pass_context
def scrape_command(ctx, url, strict):
    """Fetch the policy text at URL."""
    cfg = ctx.obj['config']
    try:
        content = asyncio.run(scrape(url, config=cfg, allow_partial=not strict))
    except AccessDeniedError as e:
        print_error(f'Website blocks automated access, please review the privacy policy manually: {e.url}')
    except PolicyNotFoundError as e:
        print_error(f'Privacy policy not found: {e}')
    except ScrapeError as e:
        print_error(str(e))
    echo_json(content.as_dict())

@cli.command('pages', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.pass_context
def pages(ctx, url):
    """List privacy, legal, about and support pages linked from URL."""
    cfg = ctx.obj['config']
    try:
        relevant = asyncio.run(discover_relevant_pages(url, cfg))
    except Exception as e:
        print_error(f'Page discovery failed: {e}')
    echo_json(relevant.as_dict())

@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))

if __name__ == "__main__":
    cli()
