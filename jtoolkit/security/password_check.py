#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Password Strength Checker

Scores a password 0-100 with fixed heuristics: length, character-class
variety, penalties for repeated characters, sequences, keyboard walks and
well-known passwords. Also reports a rough entropy estimate and suggestions.
The password is read with getpass when not given on the command line.
"""

import argparse
import getpass
import math
import string
import sys
from dataclasses import dataclass, field

COMMON_PASSWORDS = frozenset({
    "123456", "123456789", "12345678", "12345", "1234567", "1234567890", "111111",
    "123123", "000000", "654321", "666666", "121212", "password", "password1",
    "password123", "passw0rd", "qwerty", "qwerty123", "qwertyuiop", "abc123",
    "iloveyou", "admin", "admin123", "welcome", "welcome1", "letmein", "monkey",
    "dragon", "football", "baseball", "master", "login", "princess", "sunshine",
    "shadow", "superman", "trustno1", "starwars", "whatever", "hello", "freedom",
    "charlie", "michael", "jordan", "secret", "summer", "winter", "changeme", "root",
    "test", "guest", "zaq12wsx", "1q2w3e4r", "asdfgh", "zxcvbnm",
})
KEYBOARD_ROWS = ("qwertyuiop", "asdfghjkl", "zxcvbnm", "1234567890")

CLASS_POOLS = {
    "lower": 26,
    "upper": 26,
    "digits": 10,
    "symbols": len(string.punctuation),
}
RATINGS = ((20, "Very Weak"), (40, "Weak"), (60, "Fair"), (80, "Strong"), (101, "Very Strong"))


@dataclass
class Strength:
    score: int
    rating: str
    entropy: float
    classes: list[str]
    suggestions: list[str] = field(default_factory=list)


def char_classes(pw: str) -> list[str]:
    found = []
    if any(c.islower() for c in pw):
        found.append("lower")
    if any(c.isupper() for c in pw):
        found.append("upper")
    if any(c.isdigit() for c in pw):
        found.append("digits")
    if any(c in string.punctuation or c == " " for c in pw):
        found.append("symbols")
    if any(not c.isascii() for c in pw):
        found.append("other")
    return found


def entropy_bits(pw: str) -> float:
    classes = char_classes(pw)
    pool = sum(CLASS_POOLS.get(c, 100) for c in classes)
    return round(len(pw) * math.log2(pool), 1) if pool else 0.0


def repeat_runs(pw: str, length: int = 3) -> int:
    """Count runs of `length`+ identical characters."""
    runs, i = 0, 0
    while i < len(pw):
        j = i
        while j < len(pw) and pw[j] == pw[i]:
            j += 1
        if j - i >= length:
            runs += 1
        i = j
    return runs


def sequence_runs(pw: str, length: int = 3) -> int:
    """Count ascending/descending runs like 'abc', '321' (case-insensitive)."""
    low = pw.lower()
    runs, i = 0, 0
    while i <= len(low) - length:
        step = ord(low[i + 1]) - ord(low[i])
        if step in (1, -1) and low[i].isalnum():
            j = i + 1
            while j < len(low) and ord(low[j]) - ord(low[j - 1]) == step and low[j].isalnum():
                j += 1
            if j - i >= length:
                runs += 1
                i = j
                continue
        i += 1
    return runs


def has_keyboard_walk(pw: str, length: int = 4) -> bool:
    low = pw.lower()
    for row in KEYBOARD_ROWS:
        for i in range(len(row) - length + 1):
            chunk = row[i:i + length]
            if chunk in low or chunk[::-1] in low:
                return True
    return False


def rating_for(score: int) -> str:
    for limit, name in RATINGS:
        if score < limit:
            return name
    return RATINGS[-1][1]


def score_password(pw: str) -> Strength:
    classes = char_classes(pw)
    suggestions: list[str] = []
    score = min(len(pw), 20) * 2
    score += 10 * len(classes[:4])
    if len(pw) >= 8:
        score += 5
    if len(pw) >= 12 and len(classes) >= 3:
        score += 10
    if len(pw) >= 16:
        score += 10

    if len(pw) < 12:
        suggestions.append("Use at least 12 characters")
    for cls, hint in (("lower", "lowercase letters"), ("upper", "uppercase letters"),
                      ("digits", "digits"), ("symbols", "symbols")):
        if cls not in classes:
            suggestions.append(f"Add {hint}")
    if len(classes) == 1:
        score -= 10

    runs = repeat_runs(pw)
    if runs:
        score -= min(runs * 10, 20)
        suggestions.append("Avoid repeated characters")
    seqs = sequence_runs(pw)
    if seqs:
        score -= min(seqs * 10, 20)
        suggestions.append("Avoid sequences like 'abc' or '123'")
    if has_keyboard_walk(pw):
        score -= 15
        suggestions.append("Avoid keyboard patterns like 'qwerty'")

    low = pw.lower()
    letters_only = "".join(c for c in low if c.isalpha())
    if low in COMMON_PASSWORDS:
        score = min(score, 5)
        suggestions.insert(0, "This is a well-known password")
    elif letters_only and letters_only in COMMON_PASSWORDS:
        score = min(score, 20)
        suggestions.insert(0, "Based on a well-known password")

    score = max(0, min(100, score))
    return Strength(score, rating_for(score), entropy_bits(pw), classes, suggestions)


def print_strength(s: Strength) -> None:
    bar = "#" * (s.score // 5)
    print(f"  Score    : {s.score}/100 [{bar:<20}] {s.rating}")
    print(f"  Entropy  : ~{s.entropy} bits")
    print(f"  Classes  : {', '.join(s.classes) or 'none'}")
    for tip in s.suggestions:
        print(f"  - {tip}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score password strength.")
    parser.add_argument("password", nargs="?", help="password to score (prompted when omitted)")
    args = parser.parse_args(argv)

    pw = args.password if args.password is not None else getpass.getpass("Password: ")
    if not pw:
        print("[ERROR] Empty password", file=sys.stderr)
        return 1
    s = score_password(pw)
    print_strength(s)
    return 0 if s.score >= 60 else 1


if __name__ == "__main__":
    sys.exit(main())
