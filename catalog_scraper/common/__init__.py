# Common utilities
from .batching import TaskResult, chunked, run_batch, run_in_batches
from .config_loader import load_config, load_max_runtime, load_request_defaults, load_scraper_config
from .deadline import Deadline
from .http import create_session, safe_fetch, safe_fetch_json
from .log_config import setup_logging
from .progress import NULL_REPORTER, ProgressEvent, ProgressReporter
from .text_utils import resolve_url, strip_html, title_case_slug, unique
