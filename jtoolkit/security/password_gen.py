#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Password Generator

Generates random passwords from the selected character classes using the
operating system's cryptographic RNG. Every selected class is guaranteed to
appear at least once and the result is shuffled. --passphrase builds
word-based passphrases instead.
"""

import argparse
import secrets
import string
import sys
from pathlib import Path

from jtoolkit.common import ToolkitError
from jtoolkit.security.password_check import score_password

AMBIGUOUS = set("Il1O0o|`'\"")
SYMBOLS = "!@#$%^&*()-_=+[]{};:,.<>?/~"
CLASSES = {
    "lower": string.ascii_lowercase,
    "upper": string.ascii_uppercase,
    "digits": string.digits,
    "symbols": SYMBOLS,
}
WORDLIST_PATHS = (Path("/usr/share/dict/words"), Path("/usr/dict/words"))
FALLBACK_WORDS = (
    "able acid aged also area army away baby back ball band bank base bath bear beat "
    "bell belt best bird blow blue boat body bone book boom born boss both bowl bulk "
    "burn bush busy cake call calm came camp card care cart case cash cast cell chat "
    "chip city clay club coal coat code cold come cook cool cope copy core corn cost "
    "crew crop dark data dawn deal dear deck deep deer desk dial diet disk dock door "
    "dose down draw drum duck dust duty each earn ease east easy edge else even ever "
    "face fact fair fall farm fast fate fear feed feel file film find fine fire firm "
    "fish flag flat flow folk food foot ford form fort four free frog fuel full fund "
    "gain game gate gear gift girl glad glow goal gold golf good gray grid grow gulf "
    "hair half hall hand hang hard harm hawk head heat held help herb hero hide high "
    "hill hint hold hole home hope horn host hour huge hunt idea inch iron item jazz "
    "join joke jump jury just keen keep kind king kite knee knot lake lamp land lane "
    "last lawn lead leaf lean left lens life lift like lime line link lion list live "
    "load loan lock loft long loop lord loud love luck lung made mail main make mall "
    "many mark mask mass meal meat mild milk mill mind mint miss mode moon more moss "
    "most move much nail name navy near neat neck nest news next nice node noon nose "
    "note oak open oven pace pack page pair palm park part pass path peak pear pine "
    "pink pipe plan play plot plum poem pole pond pool port post pure quiz race rain "
    "rank rare rest rice rich ride ring rise road rock roof room root rope rose ruby "
    "rule safe sage sail salt sand save seal seat seed ship shoe shop silk sing site "
    "size skin slow snow soap sock soft soil song soup star stem step suit swan tail "
    "tale tank tape task team tent term test text tide tile time tone tool tour town "
    "tree trip tube tune twin unit vase vast verb view vine vote wage walk wall wave "
    "weed well west wind wing wire wise wolf wood wool word work yard yarn year zone"
).split()


def build_pools(selected: list[str], *, exclude_ambiguous: bool = False, exclude: str = "") -> dict[str, str]:
    banned = set(exclude) | (AMBIGUOUS if exclude_ambiguous else set())
    pools = {}
    for name in selected:
        if name not in CLASSES:
            raise ToolkitError(f"Unknown character class {name!r}")
        chars = "".join(c for c in CLASSES[name] if c not in banned)
        if not chars:
            raise ToolkitError(f"Character class {name!r} is empty after exclusions")
        pools[name] = chars
    if not pools:
        raise ToolkitError("Select at least one character class")
    return pools


def generate_password(length: int, pools: dict[str, str]) -> str:
    """One char from every pool, the rest from their union, then shuffled."""
    if length < len(pools):
        raise ToolkitError(f"Length {length} is shorter than the {len(pools)} required classes")
    chars = [secrets.choice(p) for p in pools.values()]
    alphabet = "".join(pools.values())
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def load_words() -> list[str]:
    for path in WORDLIST_PATHS:
        try:
            words = [
                w for w in path.read_text(encoding="utf-8", errors="ignore").split()
                if w.isascii() and w.isalpha() and w.islower() and 4 <= len(w) <= 8
            ]
        except OSError:
            continue
        if len(words) >= 1000:
            return words
    return FALLBACK_WORDS


def generate_passphrase(words: int, *, separator: str = "-", capitalize: bool = False,
                        add_number: bool = False, wordlist: list[str] | None = None) -> str:
    if words < 1:
        raise ToolkitError("A passphrase needs at least one word")
    pool = wordlist or load_words()
    picked = [secrets.choice(pool) for _ in range(words)]
    if capitalize:
        picked = [w.capitalize() for w in picked]
    if add_number:
        picked.append(str(secrets.randbelow(100)))
    return separator.join(picked)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate random passwords or passphrases.")
    parser.add_argument("-l", "--length", type=int, default=16)
    parser.add_argument("-n", "--count", type=int, default=1)
    parser.add_argument("--no-lower", action="store_true")
    parser.add_argument("--no-upper", action="store_true")
    parser.add_argument("--no-digits", action="store_true")
    parser.add_argument("--no-symbols", action="store_true")
    parser.add_argument("--exclude-ambiguous", action="store_true", help="drop look-alikes such as I l 1 O 0")
    parser.add_argument("--exclude", default="", help="characters never to use")
    parser.add_argument("--passphrase", type=int, metavar="WORDS", help="generate a passphrase of N words")
    parser.add_argument("--separator", default="-")
    parser.add_argument("--capitalize", action="store_true")
    parser.add_argument("--number", action="store_true", help="append a number to passphrases")
    parser.add_argument("-q", "--quiet", action="store_true", help="print only the passwords")
    args = parser.parse_args(argv)

    try:
        if args.passphrase is not None:
            wordlist = load_words()
            results = [
                generate_passphrase(args.passphrase, separator=args.separator,
                                    capitalize=args.capitalize, add_number=args.number, wordlist=wordlist)
                for _ in range(args.count)
            ]
        else:
            selected = [name for name, off in (
                ("lower", args.no_lower), ("upper", args.no_upper),
                ("digits", args.no_digits), ("symbols", args.no_symbols),
            ) if not off]
            pools = build_pools(selected, exclude_ambiguous=args.exclude_ambiguous, exclude=args.exclude)
            results = [generate_password(args.length, pools) for _ in range(args.count)]
    except ToolkitError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    for pw in results:
        if args.quiet:
            print(pw)
        else:
            s = score_password(pw)
            print(f"  {pw}    [{s.rating}, ~{s.entropy} bits]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
