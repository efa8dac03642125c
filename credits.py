#!/usr/bin/env python3
"""
Credit parsing for TVDB episode records
Turns the director, writer and guest star arrays of a raw record into person credits.

Guest stars arrive as a flattened "Name (Role1, Role2)" list where the commas
inside the parentheses split one entry across several slots:

    1: Some Actor (Role1
    2: Role2
    3: Role3)
    4: Another Actor (Role1
    ...
"""

from enum import Enum
from typing import Iterable, List, Sequence

from model import PersonCredit, PersonType, RawEpisodeRecord


ROLE_OPEN = '('
ROLE_CLOSE = ')'
ROLE_SEPARATOR = ', '


class _ScanState(Enum):
    SEEK_OPEN_PAREN = "seek_open_paren"
    ACCUMULATING_ROLE = "accumulating_role"


def parse_people(names: Iterable[str], person_type: PersonType) -> List[PersonCredit]:
    """Map each name to a credit with an empty role, keeping order"""
    return [PersonCredit(name=name, type=person_type) for name in names]


def parse_guest_stars(entries: Sequence[str]) -> List[PersonCredit]:
    """
    Parse the guest star micro-format into credits

    Every entry either starts a credit or is folded into the role list of the
    credit opened before it, so nothing is dropped. An unterminated role list
    runs to the end of the input. An entry that closes its own parenthesis,
    such as "Name (Role)", is a complete credit rather than the start of a
    role list that swallows the entries after it.

    Args:
        entries: Raw guest star strings in catalog order

    Returns:
        List of GuestStar credits
    """
    credits: List[PersonCredit] = []
    state = _ScanState.SEEK_OPEN_PAREN
    name = ""
    roles: List[str] = []

    for entry in entries:
        if state is _ScanState.SEEK_OPEN_PAREN:
            paren = entry.find(ROLE_OPEN)
            if paren == -1:
                credits.append(PersonCredit(name=entry, type=PersonType.GUEST_STAR, role=""))
                continue

            name = entry[:paren].strip()
            first_role = entry[paren + 1:]
            if ROLE_CLOSE in first_role:
                # "Name (Role)" in a single slot
                credits.append(PersonCredit(
                    name=name,
                    type=PersonType.GUEST_STAR,
                    role=first_role.rstrip(ROLE_CLOSE)
                ))
                continue

            roles = [first_role]
            state = _ScanState.ACCUMULATING_ROLE
            continue

        if ROLE_CLOSE in entry:
            roles.append(entry.rstrip(ROLE_CLOSE))
            credits.append(PersonCredit(
                name=name,
                type=PersonType.GUEST_STAR,
                role=ROLE_SEPARATOR.join(roles)
            ))
            state = _ScanState.SEEK_OPEN_PAREN
            continue

        roles.append(entry)

    if state is _ScanState.ACCUMULATING_ROLE:
        credits.append(PersonCredit(
            name=name,
            type=PersonType.GUEST_STAR,
            role=ROLE_SEPARATOR.join(roles)
        ))

    return credits


def build_credits(record: RawEpisodeRecord) -> List[PersonCredit]:
    """Directors first, then guest stars, then writers"""
    people = parse_people(record.directors, PersonType.DIRECTOR)
    people.extend(parse_guest_stars(record.guest_stars))
    people.extend(parse_people(record.writers, PersonType.WRITER))
    return people
