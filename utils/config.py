"""
Scan configuration for Reflex.

Holds every tunable the scanner reads once at startup.
"""

from utils.http_utils import parse_header_args

VERSION = "1.0.0"
USER_AGENT = "Reflection-Sentinel/1.0"

# Marker injected into each parameter, and the placeholder written to findings
CANARY_VALUE = "ReflectCheckXSS"
PAYLOAD_MARKER = "{payload}"

# Circuit breaker / retry tuning
ERROR_THRESHOLD = 10
BACKOFF_SECONDS = 60
REQUEUE_JITTER = 2.0

DEFAULT_THREADS = 20
DEFAULT_TIMEOUT = 10
DEFAULT_OUTPUT = "xss_results.txt"
DEFAULT_LOG_FILE = "reflex.log"
JOB_QUEUE_SIZE = 1000


class ScanConfig:
    """Class to hold scan configuration parameters"""

    def __init__(self):
        self.threads = DEFAULT_THREADS       # Number of concurrent workers
        self.timeout = DEFAULT_TIMEOUT       # Per-request timeout in seconds
        self.input_file = None               # URL list (None = stdin)
        self.output = DEFAULT_OUTPUT         # Findings file, opened in append mode
        self.verbose = False                 # Echo transport errors to console
        self.log_file = DEFAULT_LOG_FILE     # Log file path
        self.no_color = False                # Disable colored output
        self.headers = {}                    # Custom request headers

        # Not exposed on the command line
        self.threshold = ERROR_THRESHOLD     # Consecutive 403s before pausing
        self.cooldown = BACKOFF_SECONDS      # Pause length in seconds
        self.requeue_jitter = REQUEUE_JITTER # Upper bound of requeue delay
        self.queue_size = JOB_QUEUE_SIZE     # Job queue capacity

    @classmethod
    def from_args(cls, args, logger=None):
        """
        Build a configuration from parsed command line arguments.

        Args:
            args (argparse.Namespace): Parsed arguments
            logger: Optional logger used to report malformed headers

        Returns:
            ScanConfig: Populated configuration
        """
        config = cls()
        config.threads = max(1, args.threads)
        config.timeout = args.timeout
        config.input_file = args.file
        config.output = args.output
        config.verbose = args.verbose
        config.log_file = args.log_file
        config.no_color = args.no_color
        config.headers = parse_header_args(args.header or [], logger=logger)
        return config
