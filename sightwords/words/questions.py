from __future__ import annotations

"""Question builder: picks the session's words and three distractors each."""

import random
from typing import List, Optional, Sequence

from ..engine.session_game import Question
from ..policy.progression import Mode
from .bank import get_sight_words

QUESTIONS_PER_SESSION = 10
OPTIONS_PER_TRIAL = 4


def _repeat_to(words: Sequence[str], count: int) -> List[str]:
    out: List[str] = []
    while words and len(out) < count:
        out.extend(words)
    return out[:count]


def session_words(
    mode: Mode,
    grade_words: Sequence[str],
    target_words: Sequence[str],
    count: int = QUESTIONS_PER_SESSION,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Words asked in one session, in order.

    - baseline: target words found in the grade list (else the whole grade
      list), repeated in order until `count`
    - target words: the target list, shuffled, repeated until `count`
    - levels 1..3: shuffled target words found in the grade list, topped up
      with other grade words; random grade words when no targets are set
    """
    rng = rng or random.Random()
    mode = Mode(mode)
    if mode == Mode.BASELINE:
        filtered = [w for w in target_words if w in grade_words] or list(grade_words)
        return _repeat_to(filtered, count)
    if mode == Mode.TARGET_WORDS:
        words = list(target_words)
        rng.shuffle(words)
        return _repeat_to(words, count)
    if not target_words:
        words = list(grade_words)
        rng.shuffle(words)
        return words[:count]
    chosen = [w for w in target_words if w in grade_words]
    rng.shuffle(chosen)
    if len(chosen) < count:
        fill = [w for w in grade_words if w not in chosen]
        rng.shuffle(fill)
        chosen.extend(fill[: count - len(chosen)])
    return chosen[:count]


def distractors_for(
    word: str,
    grade_words: Sequence[str],
    exclude: Sequence[str] = (),
    count: int = OPTIONS_PER_TRIAL - 1,
    rng: Optional[random.Random] = None,
) -> List[str]:
    rng = rng or random.Random()
    excluded = set(exclude)
    pool = [w for w in grade_words if w != word and w not in excluded]
    if len(pool) < count:
        pool = [w for w in grade_words if w != word]
    pool = list(dict.fromkeys(pool))
    rng.shuffle(pool)
    return pool[:count]


def build_questions(
    mode: Mode,
    grade_level: int,
    target_words: Sequence[str],
    count: int = QUESTIONS_PER_SESSION,
    options_per_trial: int = OPTIONS_PER_TRIAL,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """Build one session's questions; each has the target plus distractors, shuffled."""
    rng = rng or random.Random()
    mode = Mode(mode)
    grade_words = [w.lower() for w in get_sight_words(grade_level)]
    words = session_words(mode, grade_words, target_words, count, rng)
    # baseline distractors avoid the words being measured
    exclude = list(target_words) if mode == Mode.BASELINE else []
    questions: List[Question] = []
    for w in words:
        options = [w] + distractors_for(w, grade_words, exclude, options_per_trial - 1, rng)
        rng.shuffle(options)
        questions.append(Question(word=w, options=options))
    return questions
