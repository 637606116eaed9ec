"""
Challenge catalog: the bundled dataset and the programs derived from it.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from database import Store
from schemas import Challenge, Program

logger = logging.getLogger(__name__)


def load_challenges(path: Path) -> List[Challenge]:
    with open(path, encoding="utf-8") as fh:
        return [Challenge.model_validate(item) for item in json.load(fh)]


def group_by_category(challenges: Iterable[Challenge]) -> List[Program]:
    """
    Stable group-by on category.

    Programs come out in first-seen category order and each keeps its
    challenges in input order.
    """
    programs: Dict[str, Program] = {}
    for challenge in challenges:
        program = programs.get(challenge.category)
        if program is None:
            program = programs[challenge.category] = Program(category=challenge.category)
        program.challenges.append(challenge)
    return list(programs.values())


def list_categories(challenges: Iterable[Challenge]) -> List[str]:
    return [program.category for program in group_by_category(challenges)]


def filter_by_category(challenges: Iterable[Challenge], category: str) -> List[Challenge]:
    return [c for c in challenges if c.category == category]


def load_programs(store: Store, challenges: Iterable[Challenge]) -> List[Program]:
    """
    Replace every stored program with the ones grouped from `challenges`.

    Not atomic: programs saved before a failing insert stay saved.
    """
    programs = group_by_category(challenges)
    deleted = store.delete_programs()
    for program in programs:
        store.insert_program(program)
    logger.info(
        "Loaded %d programs (%d challenges), replaced %d",
        len(programs),
        sum(len(p.challenges) for p in programs),
        deleted,
    )
    return programs
