#!/usr/bin/env python3
"""Reading a flat file of fixed-width voter records.

Each record is a run of space-padded text fields with no separators, the
way many government and mainframe exports are laid out.
"""

from __future__ import annotations

import sys
import tempfile
import time
from pathlib import Path

from recblock import Record, encoded_size, has_one, read_records


class Voter(Record):
    """Voter registration record (519 bytes)."""

    last_name = has_one("sstring", length=35)
    first_name = has_one("sstring", length=20)
    middle_name = has_one("sstring", length=20)
    name_suffix = has_one("sstring", length=3)
    birthyear = has_one("sstring", length=4)
    gender = has_one("sstring", length=1)
    registration = has_one("sstring", length=8)
    addr_prefix = has_one("sstring", length=1)
    addr_num = has_one("sstring", length=7)
    addr_suffix = has_one("sstring", length=4)
    addr_prefix_direction = has_one("sstring", length=2)
    addr_street = has_one("sstring", length=30)
    addr_street_type = has_one("sstring", length=6)
    addr_suffix_direction = has_one("sstring", length=2)
    addr_ext = has_one("sstring", length=13)
    city = has_one("sstring", length=35)
    state = has_one("sstring", length=2)
    zip = has_one("sstring", length=5)
    maddr1 = has_one("sstring", length=50)
    maddr2 = has_one("sstring", length=50)
    maddr3 = has_one("sstring", length=50)
    maddr4 = has_one("sstring", length=50)
    maddr5 = has_one("sstring", length=50)
    voter_id = has_one("sstring", length=13)
    county_code = has_one("sstring", length=2)
    jurisdiction = has_one("sstring", length=5)
    ward = has_one("sstring", length=6)
    school = has_one("sstring", length=5)
    state_house = has_one("sstring", length=5)
    state_senate = has_one("sstring", length=5)
    congress = has_one("sstring", length=5)
    county_commissioner = has_one("sstring", length=5)
    village_code = has_one("sstring", length=5)
    village_precinct = has_one("sstring", length=6)
    school_precinct = has_one("sstring", length=6)
    perm_absentee_ind = has_one("sstring", length=1)
    status = has_one("sstring", length=2)


def write_sample(path: Path, count: int) -> None:
    """Write count synthetic voters to path."""
    with path.open("wb") as stream:
        for i in range(count):
            voter = Voter(
                last_name="Hurley" if i % 2 else "Okafor",
                first_name=f"Voter{i}",
                county_code="82",
                voter_id=f"{i:013d}",
            )
            stream.write(voter.to_bytes())


def main() -> int:
    """Write a sample file, then time reading it back."""
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 10_000
    print(f"Record size: {encoded_size(Voter)} bytes")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "voters.dat"
        write_sample(path, count)

        start = time.perf_counter()
        read = 0
        with path.open("rb") as stream:
            for voter in read_records(Voter, stream):
                read += 1
        elapsed = time.perf_counter() - start

    print(f"Processed {read} records in {elapsed:.2f} seconds")
    if read:
        print(f"Last record: {voter.first_name} {voter.last_name} ({voter.voter_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
