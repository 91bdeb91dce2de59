#!/usr/bin/env python3
"""
Reflex - XSS Reflection Auditor

Reads candidate URLs, injects a canary into each query parameter in turn,
and reports the parameters whose canary is reflected verbatim in the
response. Backs off automatically when the target starts answering 403.
"""

import argparse
import os
import sys
import time

from colorama import init, Fore

from scanners.breaker import CircuitBreaker
from scanners.pool import ScanPool
from scanners.probe import ProbeExecutor
from utils.config import (
    DEFAULT_LOG_FILE, DEFAULT_OUTPUT, DEFAULT_THREADS, DEFAULT_TIMEOUT,
    VERSION, ScanConfig,
)
from utils.input_reader import InputError, open_job_source
from utils.logger import setup_logger
from utils.reporter import ResultWriter


def print_banner():
    """Display the tool banner."""
    banner = f"""
{Fore.GREEN}#########################################
{Fore.GREEN}#                                       #
{Fore.GREEN}#                REFLEX                 #
{Fore.GREEN}#         XSS Reflection Auditor        #
{Fore.GREEN}#             Version {VERSION}             #
{Fore.GREEN}#                                       #
{Fore.GREEN}#########################################
    """
    print(banner)


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='XSS reflection auditor',
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument('-t', '--threads',
                        help=f'Number of concurrent workers (default: {DEFAULT_THREADS})',
                        type=int, default=DEFAULT_THREADS)

    parser.add_argument('-f', '--file',
                        help='File containing URLs (default: read from stdin)')

    parser.add_argument('-o', '--output',
                        help=f'Output file for results (default: {DEFAULT_OUTPUT})',
                        default=DEFAULT_OUTPUT)

    parser.add_argument('-v', '--verbose',
                        help='Enable verbose output',
                        action='store_true')

    parser.add_argument('--timeout',
                        help=f'Request timeout in seconds (default: {DEFAULT_TIMEOUT})',
                        type=int, default=DEFAULT_TIMEOUT)

    parser.add_argument('-H', '--header',
                        help="Custom header, may be repeated (e.g. -H 'X-Bug-Bounty: Me')",
                        action='append', default=[])

    parser.add_argument('--log-file',
                        help=f'Log file path (default: {DEFAULT_LOG_FILE})',
                        default=DEFAULT_LOG_FILE)

    parser.add_argument('--no-color',
                        help='Disable colored output',
                        action='store_true')

    args = parser.parse_args(argv)

    if args.threads < 1:
        parser.error("--threads must be at least 1")
    if args.timeout <= 0:
        parser.error("--timeout must be positive")

    return args


def run_scan(config, urls, logger):
    """
    Wire up the scanning engine and run it over ``urls``.

    Returns:
        tuple: (ScanStats, CircuitBreaker, ResultWriter)
    """
    breaker = CircuitBreaker(threshold=config.threshold, cooldown=config.cooldown, logger=logger)
    executor = ProbeExecutor(
        timeout=config.timeout,
        headers=config.headers,
        logger=logger,
        verbose=config.verbose
    )
    writer = ResultWriter(config.output, logger=logger).start()

    pool = ScanPool(
        executor, breaker, writer,
        threads=config.threads,
        queue_size=config.queue_size,
        requeue_jitter=config.requeue_jitter,
        logger=logger
    )

    try:
        stats = pool.run(urls)
    finally:
        writer.close()

    return stats, breaker, writer


def print_summary(stats, breaker, writer, config, duration):
    counts = stats.as_dict()
    print(f"\n{Fore.CYAN}{'=' * 60}")
    print(f"{Fore.CYAN}[SCAN SUMMARY]")
    print(f"{Fore.CYAN}{'=' * 60}")
    print(f"{Fore.WHITE}Input URLs: {counts['jobs']} ({counts['skipped']} skipped)")
    print(f"{Fore.WHITE}Probes Sent: {counts['probes']}")
    print(f"{Fore.WHITE}Rate-Limited Responses: {counts['rate_limited']} ({counts['requeues']} requeued)")
    print(f"{Fore.WHITE}Transport Errors: {counts['transport_errors']}")
    print(f"{Fore.WHITE}Breaker Pauses: {breaker.cooldowns_started}")
    print(f"{Fore.WHITE}Reflections Found: {counts['findings']}")
    print(f"{Fore.WHITE}Write Failures: {writer.failed}")
    print(f"{Fore.WHITE}Scan Duration: {duration:.2f} seconds")
    print(f"{Fore.WHITE}Results saved to: {config.output}")
    print(f"{Fore.CYAN}{'=' * 60}")


def main(argv=None):
    """Main function to run the reflection auditor."""
    args = parse_arguments(argv)
    init(autoreset=True, strip=True if args.no_color else None)
    print_banner()

    logger = setup_logger(args.log_file, args.verbose)
    config = ScanConfig.from_args(args, logger=logger)

    try:
        urls = open_job_source(config.input_file)
    except InputError as e:
        print(f"{Fore.RED}[!] {e}")
        logger.error(str(e))
        return 1

    logger.info(f"Starting scan with {config.threads} workers, output to {config.output}")
    if config.headers:
        logger.info(f"Custom headers: {', '.join(config.headers)}")

    start_time = time.time()
    try:
        stats, breaker, writer = run_scan(config, urls, logger)
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}[WARNING] Scan interrupted by user.")
        logger.warning("Scan interrupted by user")
        # Workers and pending requeues are abandoned
        sys.stdout.flush()
        os._exit(130)

    duration = time.time() - start_time
    print_summary(stats, breaker, writer, config, duration)
    print(f"\n{Fore.GREEN}[+] Scan completed.")
    logger.info(f"Scan completed in {duration:.2f}s. Found {stats.findings} reflections.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
