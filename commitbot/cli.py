"""Command-line host for commitbot: ``generate`` and ``configure``."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from . import __version__
from .config import (
    Config,
    Provider,
    load_config,
    load_persisted_settings,
    save_config,
)
from .core import CommitBotWorkflow, RunOutcome
from .exceptions import CommitBotError
from .providers import get_driver
from .secrets import API_KEY_SECRET, FileSecretStore, SecretStore

RESET = "\033[0m"
BOLD = "\033[1m"
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
DIM = "\033[2m"
RED = "\033[91m"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOTHING_CHOSEN = 2
EXIT_INTERRUPTED = 130


class CLI:
    """Parses arguments and wires the workflow to terminal I/O."""

    def __init__(
        self,
        secret_store: Optional[SecretStore] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        password_prompt: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self._secret_store = secret_store
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self._password_prompt = password_prompt
        self.parser = self._create_parser()

    @property
    def secret_store(self) -> SecretStore:
        if self._secret_store is None:
            self._secret_store = FileSecretStore()
        return self._secret_store

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="commitbot",
            description="Generate AI commit message suggestions from staged changes.",
        )
        parser.add_argument(
            "--version", action="version", version=f"%(prog)s {__version__}"
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Log diagnostic details (git commands, raw responses) to stderr",
        )
        sub = parser.add_subparsers(dest="command")

        gen = sub.add_parser("generate", help="Suggest commit messages")
        gen.add_argument(
            "--repo",
            dest="repo_path",
            default=None,
            help="Path inside the repository (default: current directory)",
        )
        gen.add_argument(
            "--pick",
            type=int,
            default=None,
            help="Choose suggestion N (1-based) without prompting",
        )
        gen.add_argument(
            "--output",
            "-o",
            default=None,
            help="Write the chosen message to this file instead of stdout",
        )
        gen.add_argument("--provider", default=None, help="Override provider")
        gen.add_argument("--endpoint", default=None, help="Override endpoint")
        gen.add_argument(
            "--suggestion-count", dest="suggestion_count", type=int, default=None
        )
        gen.add_argument(
            "--max-diff-chars", dest="max_diff_chars", type=int, default=None
        )

        conf = sub.add_parser("configure", help="Set provider, endpoint and API key")
        conf.add_argument("--provider", default=None, help="gemini or openai")
        conf.add_argument("--endpoint", default=None, help="Endpoint override")
        conf.add_argument("--api-key", dest="api_key", default=None)
        conf.add_argument(
            "--suggestion-count", dest="suggestion_count", type=int, default=None
        )
        conf.add_argument(
            "--max-diff-chars", dest="max_diff_chars", type=int, default=None
        )
        return parser

    def run(self, args: Optional[List[str]] = None) -> int:
        parsed = self.parser.parse_args(args)
        self._configure_logging(parsed.debug)
        command = parsed.command or "generate"
        if parsed.command is None:
            # Bare `commitbot` behaves like `commitbot generate`.
            parsed = self.parser.parse_args(
                (["--debug"] if parsed.debug else []) + ["generate"]
            )
        try:
            if command == "configure":
                return self._configure(parsed)
            return self._generate(parsed)
        except KeyboardInterrupt:
            self._print_err(f"{DIM}CommitBot: cancelled.{RESET}")
            return EXIT_INTERRUPTED

    @staticmethod
    def _configure_logging(debug: bool) -> None:
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
        if debug:
            logging.getLogger("commitbot").setLevel(logging.DEBUG)

    # ------------------------------------------------------------------
    # generate
    # ------------------------------------------------------------------
    def _generate(self, parsed: argparse.Namespace) -> int:
        overrides = {
            "provider": parsed.provider,
            "endpoint": parsed.endpoint,
            "suggestion_count": parsed.suggestion_count,
            "max_diff_chars": parsed.max_diff_chars,
        }

        self._print_err(f"{CYAN}CommitBot: Generating commit message...{RESET}")
        # Loaded by the workflow after the staged diff check, so a broken
        # config never hides "no repository" / "no staged changes".
        workflow = CommitBotWorkflow(
            self.secret_store,
            parsed.repo_path,
            config_loader=lambda: load_config(overrides=overrides),
        )
        outcome = workflow.run()
        if not outcome.succeeded:
            return self._report_failure(outcome)

        chosen = self._choose(outcome.candidates, parsed.pick)
        if chosen is None:
            self._print_err(f"{DIM}CommitBot: no suggestion chosen.{RESET}")
            return EXIT_NOTHING_CHOSEN
        try:
            self._write_message(chosen, parsed.output)
        except CommitBotError as exc:
            self._print_err(f"{RED}CommitBot Error: {exc}{RESET}")
            return EXIT_FAILED
        return EXIT_OK

    def _report_failure(self, outcome: RunOutcome) -> int:
        if outcome.is_warning:
            self._print_err(f"{YELLOW}CommitBot: {outcome.message}{RESET}")
            return EXIT_OK
        self._print_err(f"{RED}CommitBot Error: {outcome.message}{RESET}")
        return EXIT_FAILED

    def _choose(self, candidates: List[str], pick: Optional[int]) -> Optional[str]:
        """Return the user's chosen candidate, or None when nothing was chosen."""
        if pick is not None:
            if 1 <= pick <= len(candidates):
                return candidates[pick - 1]
            self._print_err(
                f"{RED}CommitBot Error: --pick must be between 1 and "
                f"{len(candidates)}{RESET}"
            )
            return None

        self._print_err(f"{BOLD}CommitBot: AI Suggestions{RESET}")
        for idx, candidate in enumerate(candidates, start=1):
            lines = candidate.splitlines() or [""]
            self._print_err(f"  {GREEN}{idx}.{RESET} {lines[0]}")
            for extra in lines[1:]:
                self._print_err(f"     {DIM}{extra}{RESET}")

        answer = self._ask(
            f"Choose the best commit message [1-{len(candidates)}, blank to cancel]: "
        )
        if not answer:
            return None
        try:
            index = int(answer)
        except ValueError:
            return None
        if 1 <= index <= len(candidates):
            return candidates[index - 1]
        return None

    def _write_message(self, message: str, output: Optional[str]) -> None:
        if output:
            try:
                Path(output).write_text(message + "\n", encoding="utf-8")
            except OSError as exc:
                raise CommitBotError(f"Could not write {output}: {exc}") from exc
            self._print_err(f"{GREEN}CommitBot: message written to {output}{RESET}")
        else:
            self.stdout.write(message + "\n")
            self.stdout.flush()

    # ------------------------------------------------------------------
    # configure
    # ------------------------------------------------------------------
    def _configure(self, parsed: argparse.Namespace) -> int:
        try:
            # Only the stored file: COMMITBOT_* env overrides must not be
            # persisted.
            current = Config(**load_persisted_settings())
        except CommitBotError:
            current = Config()

        try:
            provider = self._select_provider(parsed.provider, current.provider)
            if provider is None:
                return EXIT_NOTHING_CHOSEN

            default_endpoint = get_driver(provider).DEFAULT_ENDPOINT
            endpoint = parsed.endpoint
            if endpoint is None:
                shown = current.endpoint or default_endpoint
                endpoint = self._ask(
                    f"Enter the HTTP endpoint for {provider.display_name} [{shown}]: "
                ) or shown
            if endpoint.strip() == default_endpoint:
                # Stored empty so a later provider switch picks its own default.
                endpoint = ""

            config = current.with_overrides(
                provider=provider,
                endpoint=endpoint,
                suggestion_count=parsed.suggestion_count,
                max_diff_chars=parsed.max_diff_chars,
            )
        except CommitBotError as exc:
            self._print_err(f"{RED}CommitBot Error: {exc}{RESET}")
            return EXIT_FAILED

        api_key = parsed.api_key
        if api_key is None:
            api_key = self._password_prompt(
                f"Enter your {provider.display_name} API key "
                "(will be stored securely): "
            ).strip()
        try:
            save_config(config)
            if api_key:
                self.secret_store.set(API_KEY_SECRET, api_key)
        except (OSError, CommitBotError) as exc:
            self._print_err(f"{RED}CommitBot Error: {exc}{RESET}")
            return EXIT_FAILED
        if api_key:
            self._print_err(
                f"{GREEN}CommitBot: {provider.display_name} API Key saved "
                f"successfully.{RESET}"
            )
        return EXIT_OK

    def _select_provider(
        self, requested: Optional[str], current: Provider
    ) -> Optional[Provider]:
        if requested:
            return Provider.parse(requested)
        providers = list(Provider)
        self._print_err(f"{BOLD}Select your AI provider{RESET}")
        for idx, option in enumerate(providers, start=1):
            marker = " (current)" if option is current else ""
            self._print_err(f"  {idx}. {option.display_name}{marker}")
        answer = self._ask(f"Provider [1-{len(providers)}]: ")
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(providers):
            return providers[int(answer) - 1]
        return Provider.parse(answer)

    # ------------------------------------------------------------------
    # terminal helpers
    # ------------------------------------------------------------------
    def _ask(self, prompt: str) -> str:
        self.stderr.write(prompt)
        self.stderr.flush()
        line = self.stdin.readline()
        return line.strip()

    def _print_err(self, text: str) -> None:
        if not getattr(self.stderr, "isatty", lambda: False)():
            text = _strip_colors(text)
        self.stderr.write(text + "\n")
        self.stderr.flush()


def _strip_colors(text: str) -> str:
    for code in (RESET, BOLD, CYAN, GREEN, YELLOW, DIM, RED):
        text = text.replace(code, "")
    return text


def main(argv: Optional[List[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
