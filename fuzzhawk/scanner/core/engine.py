"""
FuzzHawk Fuzzing Engine

The orchestrator for content discovery.
Substitutes each wordlist entry into the URL template, requests it,
analyzes the streamed body and applies the exclusion policy.
"""

import logging
import time
from typing import List, Dict, Optional, Callable, Any
from datetime import datetime
from dataclasses import dataclass

from fuzzhawk.scanner.analyzers import (
    BaseAnalyzer, ByteLineCounter, BoundedRegexScanner,
    DEFAULT_CHUNK_SIZE, DEFAULT_WINDOW_CAPACITY
)
from fuzzhawk.scanner.core.filters import ExclusionPolicy
from fuzzhawk.scanner.core.requester import AsyncRequester, RequestMethod
from fuzzhawk.scanner.core.wordlist import (
    DEFAULT_KEYWORD, build_url, load_wordlist, validate_template
)
from fuzzhawk.scanner.errors import RequestBuildError, RequestError, StreamReadError


@dataclass
class FuzzConfig:
    """Fuzzer configuration."""
    url: str = ''
    wordlist: Optional[str] = None
    method: str = 'GET'
    keyword: str = DEFAULT_KEYWORD
    exclude_size: Optional[int] = None
    exclude_lines: Optional[int] = None
    exclude_regex: Optional[str] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    window_capacity: int = DEFAULT_WINDOW_CAPACITY
    timeout: Optional[float] = 30
    delay: float = 0.0
    max_retries: int = 1
    verify_ssl: bool = True
    follow_redirects: bool = True
    custom_headers: Optional[Dict[str, str]] = None
    cookies: Optional[Dict[str, str]] = None
    proxy: Optional[str] = None
    user_agent: Optional[str] = None
    stop_on_error: bool = False


@dataclass
class FuzzResult:
    """
    A response that passed the exclusion policy.
    """
    word: str
    url: str
    status: int
    byte_count: int
    line_count: int
    matched: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'word': self.word,
            'url': self.url,
            'status': self.status,
            'size': self.byte_count,
            'lines': self.line_count,
            'matched': self.matched
        }


class FuzzEngine:
    """
    Sequential content-discovery fuzzer.

    One request is in flight at a time: the next word is not requested
    until the previous body has been fully consumed. Nothing carries over
    between words except the wordlist and the statistics.
    """

    def __init__(
            self,
            config: FuzzConfig,
            logger: Optional[logging.Logger] = None,
            result_callback: Optional[Callable[[FuzzResult], None]] = None,
            progress_callback: Optional[Callable[[Dict], None]] = None,
            requester: Optional[AsyncRequester] = None
    ):
        """
        Initialize the fuzzing engine.

        Args:
            config: Fuzzer configuration
            logger: Logger for progress and errors (defaults to the module logger)
            result_callback: Called with every shown FuzzResult
            progress_callback: Called before each request
            requester: HTTP requester to use instead of building one from config
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.result_callback = result_callback
        self.progress_callback = progress_callback

        # Components
        self.requester = requester
        self._owns_requester = requester is None
        self.policy: Optional[ExclusionPolicy] = None
        self.analyzer: Optional[BaseAnalyzer] = None
        self._method: Optional[RequestMethod] = None

        # State
        self._is_running = False
        self._is_cancelled = False
        self._start_time: Optional[float] = None

        # Results
        self.results: List[FuzzResult] = []
        self.stats: Dict[str, int] = {}

    def prepare(self):
        """
        Validate the configuration and build the analyzer.

        Runs once before any request so a bad template or regex aborts the
        whole run instead of failing every word.

        Raises:
            TemplateError: If the URL lacks the fuzz keyword
            InvalidPatternError: If the exclusion regex does not compile
            ConfigurationError: If sizes or method are invalid
        """
        validate_template(self.config.url, self.config.keyword)
        self._method = RequestMethod.parse(self.config.method)
        self.policy = ExclusionPolicy(
            exclude_size=self.config.exclude_size,
            exclude_lines=self.config.exclude_lines,
            pattern=self.config.exclude_regex
        )
        self.analyzer = self._build_analyzer()

    def _build_analyzer(self) -> BaseAnalyzer:
        if self.policy.has_pattern:
            return BoundedRegexScanner(
                self.policy.pattern,
                chunk_size=self.config.chunk_size,
                window_capacity=self.config.window_capacity,
                logger=self.logger
            )
        return ByteLineCounter(chunk_size=self.config.chunk_size, logger=self.logger)

    def _create_requester(self) -> AsyncRequester:
        return AsyncRequester(
            timeout=self.config.timeout,
            delay=self.config.delay,
            max_retries=self.config.max_retries,
            verify_ssl=self.config.verify_ssl,
            custom_headers=self.config.custom_headers,
            cookies=self.config.cookies,
            proxy=self.config.proxy,
            user_agent=self.config.user_agent
        )

    async def run(self, words: Optional[List[str]] = None) -> Dict:
        """
        Fuzz every word in order.

        Args:
            words: Words to substitute; loaded from ``config.wordlist`` if omitted

        Returns:
            Run summary dictionary

        Raises:
            ConfigurationError: On an invalid template, regex or size
            WordlistError: If the wordlist cannot be read
            RequestBuildError: If a request cannot be built from the template
            RequestError, StreamReadError: Only when ``stop_on_error`` is set
        """
        if self.analyzer is None:
            self.prepare()

        if words is None:
            words = load_wordlist(self.config.wordlist)

        self._is_running = True
        self._is_cancelled = False
        self._start_time = time.time()
        self.results = []
        self.stats = {
            'words_total': len(words),
            'requests_sent': 0,
            'shown': 0,
            'excluded': 0,
            'failed': 0
        }

        self.logger.info(f"Attacking URL: {self.config.url}")
        if self.config.wordlist:
            self.logger.info(f"Using wordlist {self.config.wordlist}")

        if self.requester is None:
            self.requester = self._create_requester()

        status = 'completed'
        try:
            await self.requester.start()

            for index, word in enumerate(words):
                if self._is_cancelled:
                    status = 'cancelled'
                    break

                self._update_progress(index, len(words), word)
                await self._fuzz_word(word)

            return self._build_results(status)

        finally:
            await self._cleanup()
            self._is_running = False

    async def _fuzz_word(self, word: str) -> Optional[FuzzResult]:
        """Request one word and report it unless excluded."""
        url = build_url(self.config.url, word, self.config.keyword)

        try:
            async with self.requester.stream(
                    url,
                    self._method,
                    allow_redirects=self.config.follow_redirects
            ) as response:
                self.stats['requests_sent'] += 1
                analysis = await self.analyzer.analyze(response.content)
                status = response.status

        except RequestBuildError as e:
            # A malformed template fails the same way for every word
            self.stats['failed'] += 1
            self.logger.error(f"Failed to create HTTP request: {e}")
            raise

        except RequestError as e:
            self.stats['failed'] += 1
            self.logger.error(f"Failed to send HTTP request: {e}")
            if self.config.stop_on_error:
                raise
            return None

        except StreamReadError as e:
            self.stats['failed'] += 1
            self.logger.error(
                f"Error while analyzing HTTP response body for {word!r}: {e.reason} "
                f"(partial: {e.result.byte_count} bytes, {e.result.line_count} lines)"
            )
            if self.config.stop_on_error:
                raise
            return None

        reasons = self.policy.reasons(analysis)
        if reasons:
            self.stats['excluded'] += 1
            self.logger.debug(f"Excluded {word!r} ({', '.join(reasons)})")
            return None

        result = FuzzResult(
            word=word,
            url=url,
            status=status,
            byte_count=analysis.byte_count,
            line_count=analysis.line_count,
            matched=analysis.matched
        )
        self.results.append(result)
        self.stats['shown'] += 1

        if self.result_callback:
            self.result_callback(result)

        return result

    def _update_progress(self, index: int, total: int, word: str):
        """Report progress before a request."""
        if self.progress_callback:
            self.progress_callback({
                'current': index + 1,
                'total': total,
                'progress': int((index / max(total, 1)) * 100),
                'word': word,
                'message': f'Fuzzing: {word[:50]}'
            })

    def _build_results(self, status: str) -> Dict:
        """Build the run summary."""
        duration = time.time() - self._start_time if self._start_time else 0

        return {
            'status': status,
            'duration': duration,
            'start_time': datetime.fromtimestamp(self._start_time).isoformat() if self._start_time else None,
            'end_time': datetime.now().isoformat(),
            'statistics': dict(self.stats),
            'results': [r.to_dict() for r in self.results]
        }

    async def _cleanup(self):
        """Cleanup resources."""
        if self.requester and self._owns_requester:
            await self.requester.close()
            self.requester = None

    def cancel(self):
        """Stop before the next request."""
        self._is_cancelled = True

    @property
    def is_running(self) -> bool:
        """Check if a run is in progress."""
        return self._is_running
