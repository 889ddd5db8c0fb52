"""Command-line interface for the crawlability auditor."""

import asyncio
import json
import sys
from typing import List, Optional

from seocrawl.config import Config, CrawlabilityThresholds
from seocrawl.crawlability import CrawlabilityAnalyzer, InvalidTargetURLError
from seocrawl.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def print_crawlability_report(report):
    """Print a crawlability report in a formatted way.

    Args:
        report: CrawlabilityReport object
    """
    print(f"\n{'=' * 60}")
    print(f"Crawlability Audit for: {report.target_url}")
    print(f"{'=' * 60}")
    print(f"\n📊 Crawlability Score: {report.crawlability_score}/100")

    print(f"\n🤖 robots.txt: {'found' if report.robots_txt_exists else 'not found'}")
    if report.robots_txt_exists:
        print(f"  • User-agents: {', '.join(report.declared_agents) or 'none'}")
        print(f"  • Disallow rules: {len(report.disallow_rules)}")
        print(f"  • Allow rules: {len(report.allow_rules)}")
        print(f"  • Sitemaps declared: {len(report.sitemaps_in_robots)}")

    print(f"\n🗺️  Sitemaps: {'found' if report.sitemap_exists else 'not found'}")
    if report.sitemap_exists:
        print(f"  • Total URLs: {report.total_url_count}")
        types = ", ".join(
            f"{sitemap_type.value}={count}"
            for sitemap_type, count in report.sitemap_type_breakdown.items()
            if count
        )
        print(f"  • Types: {types}")
        for record in report.per_sitemap_details:
            issues = f" ({len(record.quality_issues)} issues)" if record.quality_issues else ""
            print(f"  • [{record.type.value}] {record.url}: {record.url_count} URLs{issues}")

    canonical = report.canonical_url if report.has_canonical else "missing"
    print(f"\n🔗 Canonical: {canonical}")

    if report.recommendations:
        print(f"\n💡 Recommendations:")
        for rec in report.recommendations:
            print(f"  • {rec}")

    print(f"\n{'=' * 60}\n")


async def _audit_all(urls: List[str], config: Config, thresholds: CrawlabilityThresholds):
    """Audit URLs one after another.

    Returns:
        List of (url, report or None, error or None)
    """
    analyzer = CrawlabilityAnalyzer(config=config, thresholds=thresholds)
    results = []
    for url in urls:
        try:
            report = await analyzer.audit(url)
        except InvalidTargetURLError as e:
            results.append((url, None, str(e)))
        else:
            results.append((url, report, None))
    return results


def crawlability_command(args) -> int:
    """Handle the crawlability command."""
    config = Config.from_env()
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.audit_timeout is not None:
        config.audit_timeout = args.audit_timeout
    if args.user_agent:
        config.user_agent = args.user_agent

    if args.thresholds:
        thresholds = CrawlabilityThresholds.from_file(args.thresholds)
    else:
        thresholds = CrawlabilityThresholds.from_env()

    results = asyncio.run(_audit_all(args.urls, config, thresholds))

    exit_code = 0
    for url, _, error in results:
        if error:
            print(f"\n❌ {error}", file=sys.stderr)
            exit_code = 1

    reports = [report for _, report, _ in results if report is not None]

    if args.output == "json":
        documents = [
            {"url": report.target_url, "crawlability": report.to_dict()}
            for report in reports
        ]
        payload = documents[0] if len(documents) == 1 else documents
        output = json.dumps(payload, indent=2)
        if args.output_file:
            with open(args.output_file, "w") as f:
                f.write(output)
            logger.info(f"Wrote {len(documents)} report(s) to {args.output_file}")
        else:
            print(output)
    else:
        for report in reports:
            print_crawlability_report(report)

    return exit_code


def thresholds_command(args) -> int:
    """Handle the thresholds command."""
    if args.thresholds:
        thresholds = CrawlabilityThresholds.from_file(args.thresholds)
    else:
        thresholds = CrawlabilityThresholds.from_env()

    if args.save:
        thresholds.save_to_file(args.save)
        print(f"✅ Thresholds written to {args.save}")
    else:
        print(json.dumps({"thresholds": thresholds.to_dict()}, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="SEOCrawl - Audit robots.txt, sitemaps and canonical tags for crawlability"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging verbosity (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    crawl_parser = subparsers.add_parser(
        "crawlability", help="Audit one or more URLs for crawlability."
    )
    crawl_parser.add_argument(
        "urls", nargs="+", help="Page URLs to audit (one or more)"
    )
    crawl_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    crawl_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    crawl_parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds",
    )
    crawl_parser.add_argument(
        "--audit-timeout",
        type=float,
        help="Overall time limit per audited URL in seconds",
    )
    crawl_parser.add_argument(
        "--user-agent",
        help="User agent sent with every request",
    )
    crawl_parser.add_argument(
        "--thresholds",
        help="JSON file with threshold overrides",
    )
    crawl_parser.set_defaults(func=crawlability_command)

    thresholds_parser = subparsers.add_parser(
        "thresholds", help="Show or save the effective analysis thresholds."
    )
    thresholds_parser.add_argument(
        "--thresholds",
        help="JSON file to start from (default: defaults plus SEOCRAWL_THRESHOLD_* overrides)",
    )
    thresholds_parser.add_argument(
        "--save",
        metavar="PATH",
        help="Write thresholds to a JSON file usable with 'crawlability --thresholds'",
    )
    thresholds_parser.set_defaults(func=thresholds_command)

    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
