from __future__ import annotations

"""CLI for KeyQuest: a text front-end over QuizSession plus data inspection."""

import argparse
from pathlib import Path
from typing import Any

import pandas as pd

from .. import __version__
from ..analytics.metrics import domain_accuracy, greedy_policy, qtable_frame
from ..config.config import load_config, validate_config
from ..quiz.report import format_summary
from ..quiz.skill_state import DOMAINS, SkillState
from ..storage.data_store import DataStore
from ..storage.store import load_answers, load_sessions
from ..theory.notes import is_note_token, split_tokens
from .events import ANSWER_FEEDBACK, QUIZ_REFRESH
from .explain import enable as explain_enable
from .session_manager import QuizRefresh, QuizSession


def _load_cfg(path: str | None) -> dict[str, Any]:
    return validate_config(load_config(path))


def _print_refresh(payload: QuizRefresh) -> None:
    print(f"\nScore: {payload.score:g} | Accuracy: {payload.accuracy:.0f}%")
    print(payload.title.upper())
    print(payload.description)


def _print_feedback(correct: bool) -> None:
    print("Correct!" if correct else "Incorrect.")


def _ask_levels(defaults: SkillState) -> SkillState:
    """Let a first-run learner rate each skill domain 0-2."""
    print("Welcome! Rate your current skill (0 = beginner, 2 = advanced).")
    state = defaults
    for domain in DOMAINS:
        default = defaults.level(domain)
        try:
            raw = input(f"{domain.capitalize()} [{default}]: ").strip()
        except EOFError:
            raw = ""
        if not raw:
            continue
        try:
            level = int(raw)
        except ValueError:
            level = -1
        if level not in (0, 1, 2):
            print(f"WARNING: '{raw}' is not 0, 1 or 2; keeping {default}.")
            continue
        state = state.with_level(domain, level)
    return state


def _run_quiz(cfg: dict[str, Any]) -> int:
    session = QuizSession(cfg)
    session.events.subscribe(QUIZ_REFRESH, _print_refresh)
    session.events.subscribe(ANSWER_FEEDBACK, _print_feedback)
    levels = None
    if session.store.is_new_user():
        levels = _ask_levels(SkillState.from_json(cfg.get("new_user")))
    try:
        session.start(new_user_levels=levels)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    while not session.finished:
        try:
            raw = input("Play notes (e.g. C4-E4-G4), 'q' to stop: ")
        except EOFError:
            raw = "q"
        if raw.strip().lower() == "q":
            if session.answered == 0:
                print("No answers given; quiz not recorded.")
                return 0
            session.finish()
            break
        tokens = split_tokens(raw)
        if not tokens:
            continue
        unknown = [t for t in tokens if not is_note_token(t)]
        if unknown:
            print(f"Not a note: {', '.join(unknown)} (use names like C4 or F#4).")
            continue
        session.submit_answer(tokens)

    report = session.finish()
    print()
    print(format_summary(report))
    print("\nYour progress has been saved.")
    return 0


def _show_state(store: DataStore) -> int:
    state = store.load_skill_state()
    print(f"New user: {store.is_new_user()}")
    for name, level in state.to_json().items():
        print(f"{name:>7}: {level}")
    return 0


def _show_qtable(store: DataStore, *, greedy: bool) -> int:
    table = store.load_qtable()
    df = greedy_policy(table) if greedy else qtable_frame(table)
    if df.empty:
        print("Q-table is empty.")
        return 0
    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(df.to_string(index=False))
    return 0


def _show_history(data_dir: Path) -> int:
    sessions = load_sessions(data_dir)
    if sessions.empty:
        print("No quiz history yet.")
        return 0
    print(sessions.to_string(index=False))
    print()
    print(domain_accuracy(load_answers(data_dir)).to_string(index=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="keyquest")
    p.add_argument("--version", action="version", version=f"keyquest {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    qp = sub.add_parser("quiz", help="Run an adaptive quiz")
    qp.add_argument("--config", default=None)
    qp.add_argument("--questions", type=int, default=None)
    qp.add_argument("--explain", action="store_true")

    for name in ("show-state", "history", "reset"):
        sp = sub.add_parser(name)
        sp.add_argument("--config", default=None)
    sq = sub.add_parser("show-qtable")
    sq.add_argument("--config", default=None)
    sq.add_argument("--greedy", action="store_true", help="Only the best question per state")
    sub.choices["reset"].add_argument("--yes", action="store_true", help="Confirm deleting learned data")

    args = p.parse_args(argv)
    cfg = _load_cfg(args.config)
    data_dir = Path(cfg["storage"]["data_dir"])

    if args.cmd == "quiz":
        if args.explain:
            explain_enable(True)
        if args.questions is not None:
            if args.questions < 1:
                print("ERROR: --questions must be >= 1")
                return 2
            cfg["quiz"]["questions"] = args.questions
        return _run_quiz(cfg)

    store = DataStore(data_dir)
    if args.cmd == "show-state":
        return _show_state(store)
    if args.cmd == "show-qtable":
        return _show_qtable(store, greedy=args.greedy)
    if args.cmd == "history":
        return _show_history(data_dir)
    if args.cmd == "reset":
        if not args.yes:
            print(f"This deletes {store.path}. Re-run with --yes to confirm.")
            return 2
        store.reset()
        print("Learned data removed.")
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
