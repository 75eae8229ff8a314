"""Generation workflow: staged diff in, candidate commit messages out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from .config import Config, load_config
from .exceptions import (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    CommitBotError,
    EmptyResultError,
    UserError,
)
from .git import DEFAULT_HISTORY_COUNT, GitRepo, find_git_repo_root
from .prompt import GenerationRequest
from .providers import get_driver
from .secrets import API_KEY_SECRET, SecretStore
from .transport import post

logger = logging.getLogger(__name__)

NO_REPOSITORY_MESSAGE = "No active Git repository found."
NO_STAGED_CHANGES_MESSAGE = "No staged changes found."
NOT_CONFIGURED_MESSAGE = (
    "CommitBot is not configured. Run \"commitbot configure\"."
)
NO_SUGGESTIONS_MESSAGE = "CommitBot received no suggestions from the AI endpoint."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

Transport = Callable[..., Any]


class RunState(str, Enum):
    """Steps of a single generation run, in order."""

    IDLE = "idle"
    RESOLVING_REPO = "resolving_repo"
    READING_DIFF = "reading_diff"
    CHECKING_DIFF = "checking_diff"
    READING_HISTORY = "reading_history"
    BUILDING_PROMPT = "building_prompt"
    LOADING_SECRET = "loading_secret"
    DISPATCHING = "dispatching"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunOutcome:
    """Terminal result of a run: DONE with candidates, or FAILED."""

    state: RunState
    candidates: List[str] = field(default_factory=list)
    message: Optional[str] = None
    severity: Optional[str] = None
    failed_at: Optional[RunState] = None
    repo_path: Optional[Path] = None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE

    @property
    def is_warning(self) -> bool:
        return self.severity == SEVERITY_WARNING


class CommitBotWorkflow:
    """Runs reader -> prompt -> driver -> transport as one linear pass.

    Every failure is converted into a FAILED ``RunOutcome``; ``run`` never
    raises. Collaborators (secret store, transport, repository resolver,
    config) are injected so the workflow can be exercised without Git,
    network or a real key store.
    """

    def __init__(
        self,
        secret_store: SecretStore,
        repo_path: Optional[Union[str, Path]] = None,
        config: Optional[Config] = None,
        *,
        config_loader: Callable[[], Config] = load_config,
        transport: Transport = post,
        repo_resolver: Callable[
            [Optional[Union[str, Path]]], Optional[Path]
        ] = find_git_repo_root,
        history_count: int = DEFAULT_HISTORY_COUNT,
    ) -> None:
        self.secret_store = secret_store
        self.repo_path = repo_path
        self._config = config
        self._config_loader = config_loader
        self._transport = transport
        self._repo_resolver = repo_resolver
        self.history_count = history_count
        self.state = RunState.IDLE

    def _enter(self, state: RunState) -> None:
        logger.debug("commitbot run: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> RunOutcome:
        """Execute one generation run and return its outcome."""
        self.state = RunState.IDLE
        repo_root: Optional[Path] = None
        try:
            self._enter(RunState.RESOLVING_REPO)
            repo_root = self._repo_resolver(self.repo_path)
            if repo_root is None:
                raise UserError(NO_REPOSITORY_MESSAGE)
            repo = GitRepo(repo_root)

            self._enter(RunState.READING_DIFF)
            diff = repo.get_staged_diff()

            self._enter(RunState.CHECKING_DIFF)
            if not diff.strip():
                raise UserError(NO_STAGED_CHANGES_MESSAGE, SEVERITY_WARNING)

            # One snapshot per run so settings changed mid-run are not mixed.
            config = self._config or self._config_loader()

            self._enter(RunState.READING_HISTORY)
            subjects = repo.get_recent_subjects(self.history_count)

            self._enter(RunState.BUILDING_PROMPT)
            request = GenerationRequest.create(
                diff_text=diff,
                recent_subjects=subjects,
                provider=config.provider,
                suggestion_count=config.suggestion_count,
                max_diff_chars=config.max_diff_chars,
            )
            prompt = request.prompt

            self._enter(RunState.LOADING_SECRET)
            api_key = self.secret_store.get(API_KEY_SECRET)
            if not api_key:
                raise UserError(NOT_CONFIGURED_MESSAGE)

            self._enter(RunState.DISPATCHING)
            candidates = self.generate(prompt, api_key, config)
        except CommitBotError as exc:
            return self._fail(exc, repo_root)
        except Exception as exc:  # noqa: BLE001 - run must always terminate
            logger.debug("commitbot run crashed", exc_info=True)
            message = str(exc) or UNKNOWN_ERROR_MESSAGE
            return self._failed(message, SEVERITY_ERROR, repo_root)

        self._enter(RunState.DONE)
        return RunOutcome(
            state=RunState.DONE,
            candidates=candidates,
            repo_path=repo_root,
        )

    def generate(
        self,
        prompt: str,
        api_key: str,
        config: Config,
    ) -> List[str]:
        """Dispatch ``prompt`` to the configured provider and parse candidates.

        Whatever number of candidates the provider returns is passed
        through unchanged; only an empty result is an error.
        """
        driver = get_driver(config.provider)
        outbound = driver.build_request(
            prompt,
            api_key,
            config.suggestion_count,
            endpoint=config.endpoint or None,
        )
        response = self._transport(
            outbound.endpoint,
            outbound.headers,
            outbound.body,
            timeout=config.request_timeout,
        )

        self._enter(RunState.PARSING)
        candidates = driver.parse_response(response)
        if not candidates:
            raise EmptyResultError(NO_SUGGESTIONS_MESSAGE, response=response)
        logger.debug(
            "Received %d candidate(s), requested %d",
            len(candidates),
            config.suggestion_count,
        )
        return candidates

    def _fail(
        self, exc: CommitBotError, repo_root: Optional[Path]
    ) -> RunOutcome:
        if isinstance(exc, EmptyResultError):
            logger.debug("commitbot API response: %r", exc.response)
        else:
            logger.debug("commitbot run failed", exc_info=exc)
        severity = getattr(exc, "severity", SEVERITY_ERROR)
        return self._failed(str(exc), severity, repo_root)

    def _failed(
        self, message: str, severity: str, repo_root: Optional[Path]
    ) -> RunOutcome:
        failed_at = self.state
        self._enter(RunState.FAILED)
        return RunOutcome(
            state=RunState.FAILED,
            message=message,
            severity=severity,
            failed_at=failed_at,
            repo_path=repo_root,
        )


def generate_suggestions(
    secret_store: SecretStore,
    repo_path: Optional[Union[str, Path]] = None,
    config: Optional[Config] = None,
    **kwargs: Any,
) -> RunOutcome:
    """Convenience wrapper running a single workflow."""
    return CommitBotWorkflow(secret_store, repo_path, config, **kwargs).run()
