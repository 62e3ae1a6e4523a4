from __future__ import annotations

"""CLI for the sight-word trainer using ParticipantContext and SessionManager."""

import argparse
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from analytics.config import AnalyticsConfig
from analytics.export import (
    build_export,
    default_filename,
    export_baseline_csv,
    export_json,
    export_sessions_csv,
    export_surveys_csv,
    sessions_table,
    SESSION_HEADERS,
)
from analytics.metrics import word_session_matrix, word_summary
from analytics.plots import plot_phase_change, plot_word_heatmap
from analytics.prepare import load_trials, sessions_frame
from analytics.smoothing import ewma_by_session
from storage.kv import open_store
from storage.records import list_participants
from storage.store import export_ndjson, init_store, query_word, records_frame

from ..config.config import load_config, timing_from, validate_config
from ..engine.clock import ThreadingScheduler
from ..engine.recorder import Trial
from ..engine.session_game import AnswerResult, GameState
from ..errors import InsufficientWordsError, SightWordsError
from ..policy.mastery import level_history, mastery_report
from ..policy.progression import MODE_LABELS, Mode
from ..results.schema import INTERVENTION_LEVELS
from ..stats.points import format_summary, words_practiced
from ..util.randomness import make_rng, seed_if_needed
from ..words import targets
from . import events as ev
from .context import ParticipantContext
from .explain import enable as explain_enable
from .session_manager import SessionManager, SessionOutcome
from .survey import OPEN_QUESTIONS, RATING_QUESTIONS, build_survey


def _open_context(args: argparse.Namespace, cfg: Dict[str, Any]) -> ParticipantContext:
    store_cfg = cfg["storage"]
    store = open_store(store_cfg["backend"], args.store or store_cfg["path"])
    return ParticipantContext(store, args.participant, cfg).open()


def _print_words(words: List[str], minimum: int) -> None:
    print(", ".join(words) if words else "(no target words)")
    if len(words) < minimum:
        print(f"{len(words)} words (need {minimum - len(words)} more)")
    else:
        print(f"{len(words)} words")


def _subscribe_console(bus: ev.EventBus) -> None:
    bus.subscribe(ev.POINTS_AWARDED, lambda p: print(f"+{p['points']} coins (total {p['total']})"))
    bus.subscribe(ev.MASTERY_ACHIEVED, lambda p: print(f"*** Mastery achieved on level {p['level']}! ***"))
    bus.subscribe(ev.BASELINE_ESTABLISHED, lambda p: print(f"Baseline established after {p['sessions']} sessions."))
    bus.subscribe(
        ev.GRADE_SUGGESTION,
        lambda p: print(f"Two perfect baseline sessions: consider raising grade {p['current']} to {p['suggested']}."),
    )
    bus.subscribe(ev.TARGET_WORDS_COMPLETED, lambda p: print("*** Every target word read correctly! ***"))


def _run_interactive(sm: SessionManager, mode: Mode) -> int:
    done = threading.Event()
    result: Dict[str, Optional[SessionOutcome]] = {"outcome": None}

    def on_trial_open(trial: Trial) -> None:
        print(f"\nQuestion {trial.index + 1}:")
        for i, opt in enumerate(trial.options, start=1):
            print(f"  {i}. {opt}")
        print("Answer with a number or the word (q to quit): ", end="", flush=True)

    def on_prompt(trial: Trial) -> None:
        print(f"\n  [prompt] {trial.word}")

    def on_trial_end(trial: Trial) -> None:
        if trial.outcome is not None and trial.elapsed_s is not None and trial.elapsed_s >= sm.timing.time_limit_s:
            print(f"\nTime's up! The word was '{trial.word}'.")

    def on_finish(outcome: SessionOutcome) -> None:
        result["outcome"] = outcome
        # finished by the time limit: the input loop is still waiting for a line
        if threading.current_thread() is not threading.main_thread():
            print("\nSession complete. Press Enter to see the summary.", flush=True)
        done.set()

    game = sm.start_session(
        mode,
        on_finish=on_finish,
        on_trial_open=on_trial_open,
        on_prompt=on_prompt,
        on_trial_end=on_trial_end,
    )
    try:
        while game.state == GameState.RUNNING:
            line = input().strip()
            if done.is_set():
                break
            if line.lower() == "q":
                sm.abandon()
                print("Session abandoned; nothing was recorded.")
                return 1
            trial = game.current
            if trial is None:
                continue
            word = trial.options[int(line) - 1] if line.isdigit() and 0 < int(line) <= len(trial.options) else line.lower()
            res = game.answer(word)
            if res == AnswerResult.RETRY:
                print("Try again!  ", end="", flush=True)
            elif res == AnswerResult.CORRECT:
                print("Correct!")
            elif res == AnswerResult.ASSISTED:
                print("Correct (with help).")
            elif res == AnswerResult.INCORRECT:
                print("Recorded.")
    except (KeyboardInterrupt, EOFError):
        sm.abandon()
        print("\nSession abandoned; nothing was recorded.")
        return 1
    done.wait(timeout=1.0)
    outcome = result["outcome"]
    if outcome is None:
        return 1
    print("\nSession Summary:")
    print(format_summary(outcome.record))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="sightwords")
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("--store", default=None, help="Override the store file path")
    p.add_argument("-p", "--participant", default="default", help="Participant id")
    p.add_argument("--explain", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("participants")

    cp = sub.add_parser("configure")
    cp.add_argument("--grade", type=int, required=True)
    cp.add_argument("--reading", type=int, required=True)

    wp = sub.add_parser("words")
    wsub = wp.add_subparsers(dest="words_cmd", required=True)
    wsub.add_parser("list")
    wa = wsub.add_parser("add")
    wa.add_argument("words", nargs="+")
    wr = wsub.add_parser("remove")
    wr.add_argument("words", nargs="+")
    wr.add_argument("--add", nargs="+", default=[], help="Words to add in the same save")
    wx = wsub.add_parser("replace")
    wx.add_argument("old")
    wx.add_argument("new")
    wsub.add_parser("generate")
    ws = wsub.add_parser("suggest")
    ws.add_argument("word")
    ws.add_argument("--count", type=int, default=5)
    wv = wsub.add_parser("save")
    wv.add_argument("words", nargs="+")

    sub.add_parser("status")

    rp = sub.add_parser("run")
    rp.add_argument("--mode", required=True, choices=[m.value for m in Mode])

    hp = sub.add_parser("history")
    hp.add_argument("--words", action="store_true", help="Per-word summary from the trial table")
    hp.add_argument("--word", default=None, help="Every recorded trial of one word")

    sv = sub.add_parser("survey")
    sv.add_argument("--ratings", type=int, nargs=4, metavar=("HELPFUL", "ENGAGING", "EASY", "RECOMMEND"))
    sv.add_argument("--liked", default="")
    sv.add_argument("--difficulties", default="")
    sv.add_argument("--improvements", default="")

    ep = sub.add_parser("export")
    ep.add_argument("kind", choices=["csv", "baseline-csv", "surveys-csv", "json", "trials"])
    ep.add_argument("--out", default=None)

    pp = sub.add_parser("plot")
    pp.add_argument("--out", default="phase_graph.png")
    pp.add_argument("--words-out", default=None, help="Also save a word-by-session heatmap")

    cb = sub.add_parser("celebrations")
    cb.add_argument("--dismiss", default=None)

    args = p.parse_args(argv)

    seed_if_needed()
    cfg = validate_config(load_config(args.config))
    if args.explain or cfg.get("explain"):
        explain_enable(True)

    if args.cmd == "participants":
        store_cfg = cfg["storage"]
        ids = list_participants(open_store(store_cfg["backend"], args.store or store_cfg["path"]))
        for pid in ids:
            print(pid)
        if not ids:
            print("(no participants)")
        return 0

    ctx = _open_context(args, cfg)
    try:
        return _dispatch(args, cfg, ctx)
    except InsufficientWordsError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        print("Use `sightwords words save ...`, `words generate` or `words replace OLD NEW` to set them up.", file=sys.stderr)
        return 2
    except SightWordsError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    finally:
        ctx.close()


def _dispatch(args: argparse.Namespace, cfg: Dict[str, Any], ctx: ParticipantContext) -> int:
    minimum = ctx.criteria.min_target_words
    limit = int(cfg["session"].get("max_target_words", targets.MAX_TARGET_WORDS))

    if args.cmd == "configure":
        info = ctx.configure(args.grade, args.reading)
        print(
            f"Saved: grade {info.grade_level}, reading level {info.reading_level} "
            f"(word lists: L1 grade {info.grade_for_level(1)}, L2 grade {info.grade_for_level(2)}, L3 grade {info.grade_for_level(3)})"
        )
        return 0

    if args.cmd == "words":
        grade = ctx.participant.grade_level if ctx.participant else 5
        if args.words_cmd == "list":
            _print_words(ctx.target_words, minimum)
            return 0
        if args.words_cmd == "suggest":
            print(", ".join(targets.suggest(args.word, grade, args.count)))
            return 0
        if args.words_cmd == "generate":
            draft = targets.generate(grade, limit, make_rng())
        elif args.words_cmd == "add":
            draft = list(ctx.target_words)
            for w in args.words:
                draft = targets.add_word(draft, w, limit)
            if draft == ctx.target_words and len(draft) >= limit:
                print(f"The list already has {limit} words; use `words replace OLD NEW` to swap one.", file=sys.stderr)
                return 1
        elif args.words_cmd == "remove":
            draft = list(ctx.target_words)
            for w in args.words:
                draft = targets.remove_word(draft, w)
            for w in args.add:
                draft = targets.add_word(draft, w, limit)
        elif args.words_cmd == "replace":
            draft = targets.replace_word(ctx.target_words, args.old, args.new)
            if draft == ctx.target_words:
                print(f"ERROR: '{args.old}' is not in the list or '{args.new}' already is.", file=sys.stderr)
                return 2
        else:
            draft = targets.clean(args.words, limit)
        _print_words(draft, minimum)
        ctx.save_target_words(draft)
        print("Target words saved.")
        return 0

    if args.cmd == "status":
        if ctx.participant:
            print(f"Participant {ctx.participant_id}: grade {ctx.participant.grade_level}, reading level {ctx.participant.reading_level}")
        else:
            print(f"Participant {ctx.participant_id}: not configured (run `configure`)")
        print(f"Target words: {len(ctx.target_words)}  Coins: {ctx.total_score}  Words practiced: {words_practiced(ctx.sessions)}")
        for mode, st in ctx.gate().status().items():
            mark = "[x]" if st.completed else ("[ ]" if st.available else "[-]")
            print(f"  {mark} {MODE_LABELS[mode]:<18} {st.reason}")
        return 0

    if args.cmd == "run":
        data_dir = Path(cfg["storage"]["trials_dir"])
        init_store(data_dir)
        bus = ev.EventBus()
        _subscribe_console(bus)
        sm = SessionManager(
            ctx,
            ThreadingScheduler(),
            timing=timing_from(cfg),
            bus=bus,
            speak=lambda w: print(f"\n(say) {w}"),
            rng=make_rng(),
            data_dir=data_dir,
        )
        return _run_interactive(sm, Mode(args.mode))

    if args.cmd == "history":
        if args.word:
            df = query_word(load_trials(Path(cfg["storage"]["trials_dir"])), args.word)
            df = df[df["participant_id"] == ctx.participant_id]
            cols = ["session_date", "phase", "level", "session_number", "trial", "outcome", "seconds"]
            print(df[cols].to_string(index=False) if not df.empty else "(no trials recorded)")
            return 0
        if args.words:
            df = word_summary(load_trials(Path(cfg["storage"]["trials_dir"])))
            df = df[df["word"].isin(ctx.target_words)] if ctx.target_words else df
            print(df.to_string(index=False) if not df.empty else "(no trials recorded)")
            return 0
        rows = sessions_table(ctx.baseline, ctx.sessions)
        if not rows:
            print("(no sessions)")
            return 0
        table = pd.DataFrame(rows, columns=SESSION_HEADERS).drop(columns=["Words Tested", "Response Times (s)"])
        print(table.to_string(index=False))
        for level in INTERVENTION_LEVELS:
            hist = level_history(ctx.sessions, level)
            if not hist:
                continue
            r = mastery_report(hist, ctx.criteria)
            print(
                f"Level {level}: prompted {r.prompted_sessions} (avg {r.prompted_accuracy:.1f}%), "
                f"unprompted {r.unprompted_sessions} (recent avg {r.unprompted_accuracy:.1f}%), "
                f"mastered={'yes' if r.achieved else 'no'}"
            )
        return 0

    if args.cmd == "survey":
        if args.ratings:
            ratings = dict(zip(RATING_QUESTIONS, args.ratings))
            answers = {"liked": args.liked, "difficulties": args.difficulties, "improvements": args.improvements}
        else:
            print("Rate 1 = Strongly Disagree ... 5 = Strongly Agree")
            ratings = {}
            for key, text in RATING_QUESTIONS.items():
                raw = input(f"{text} ").strip()
                ratings[key] = int(raw) if raw.isdigit() else None
            answers = {key: input(f"{text} ") for key, text in OPEN_QUESTIONS.items()}
        ctx.add_survey(build_survey(ctx.participant_id, ratings, answers))
        print("Thank you! Survey saved.")
        return 0

    if args.cmd == "export":
        out = Path(args.out or default_filename(args.kind))
        if args.kind == "csv":
            if not ctx.sessions and not ctx.baseline:
                print("No session data available")
                return 1
            export_sessions_csv(ctx.baseline, ctx.sessions, out)
        elif args.kind == "baseline-csv":
            if not ctx.baseline:
                print("No baseline data available")
                return 1
            export_baseline_csv(ctx.baseline, out)
        elif args.kind == "surveys-csv":
            if not ctx.surveys:
                print("No survey data available")
                return 1
            export_surveys_csv(ctx.surveys, out)
        elif args.kind == "json":
            export_json(build_export(ctx.participant_id, ctx.target_words, ctx.baseline, ctx.sessions, ctx.surveys), out)
        else:
            export_ndjson(records_frame(ctx.participant_id, [*ctx.baseline, *ctx.sessions]), out)
        print(f"Wrote {out}")
        return 0

    if args.cmd == "plot":
        acfg = AnalyticsConfig()
        df = ewma_by_session(sessions_frame(ctx.baseline, ctx.sessions), "accuracy", acfg.smoothing_span)
        if not plot_phase_change(df, cfg=acfg, title=f"Participant {ctx.participant_id}", save_path=args.out):
            print("No sessions to plot")
            return 1
        print(f"Wrote {args.out}")
        if args.words_out:
            matrix = word_session_matrix(records_frame(ctx.participant_id, [*ctx.baseline, *ctx.sessions]))
            if plot_word_heatmap(matrix, cfg=acfg, save_path=args.words_out):
                print(f"Wrote {args.words_out}")
        return 0

    if args.cmd == "celebrations":
        if args.dismiss:
            try:
                ctx.dismiss_celebration(args.dismiss)
            except ValueError as e:
                print(f"ERROR: {e}", file=sys.stderr)
                return 2
            print(f"Dismissed {args.dismiss}")
            return 0
        pending = ctx.pending_celebrations()
        for name in pending:
            print(name)
        if not pending:
            print("(nothing to celebrate yet)")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
