#!/usr/bin/env python3
"""
Random fuzzer for the BBCode converter.
Generates invalid/malformed markup to test converter robustness.
"""

import argparse
import random
import re
import string
import sys
import time
import traceback

# Fuzzing strategies
TAGS = [
    "b", "i", "u", "s", "sup", "sub", "quote", "blockquote", "code", "pre",
    "ol", "ul", "li", "*", "list", "table", "tr", "td", "th",
    "url", "img", "color", "size", "font", "a", "center", "spoiler", "youtube",
]

LIST_TAGS = ["ol", "ul"]
TABLE_TAGS = ["table", "tr", "td", "th"]
ARGUMENT_TAGS = ["url", "color", "size", "font", "img"]

SPECIAL_CHARS = [
    "\x00", "\x01", "\x0b", "\x0c", "\x7f",  # Control chars
    "\ufffd",  # Replacement character
    "\u00a0",  # Non-breaking space
    "\u2028", "\u2029",  # Line/paragraph separators
    "\u200b", "\u200d",  # Zero-width chars
    "\ufeff",  # BOM
    "\U0001f600",  # Astral plane
]

RESERVED = ["<", ">", "&", "<script>", "&amp;", "&lt;", "</b>", "<!--", "-->"]

# Emitted markup is exactly the set of tags the converter can open or close.
_EMITTED_TAG = re.compile(r"</?(b|i|u|s|sup|sub|blockquote|pre|ol|ul|li|table|tr|td|th)>")


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_case(name):
    return "".join(c.upper() if random.random() < 0.3 else c for c in name)


def fuzz_tag_name():
    """Generate malformed tag names."""
    strategies = [
        lambda: random.choice(TAGS),
        lambda: random_case(random.choice(TAGS)),
        lambda: random_string(1, 10),
        lambda: random.choice(TAGS) + random.choice(SPECIAL_CHARS + RESERVED),
        lambda: random.choice(["", " ", "/", "[", "]", "=", "**", "1"]),
        lambda: random.choice(TAGS) * random.randint(2, 4),
    ]
    return random.choice(strategies)()


def fuzz_open_tag():
    """Generate opening tags, well-formed or not."""
    name = fuzz_tag_name()
    strategies = [
        lambda: f"[{name}]",
        lambda: f"[{name}={random_string(0, 10)}]",
        lambda: f"[{name} {random_string(0, 10)}]",
        lambda: f"[{name}",
        lambda: f"[[{name}]",
    ]
    return random.choice(strategies)()


def fuzz_close_tag():
    """Generate closing tags, well-formed or not."""
    name = fuzz_tag_name()
    strategies = [
        lambda: f"[/{name}]",
        lambda: f"[/{name}",
        lambda: f"[/{name} ]",
        lambda: "[/]",
        lambda: "[/",
    ]
    return random.choice(strategies)()


def fuzz_text():
    """Generate text with reserved and unusual characters."""
    parts = []
    for _ in range(random.randint(1, 8)):
        choice = random.random()
        if choice < 0.5:
            parts.append(random_string(1, 12))
        elif choice < 0.7:
            parts.append(random.choice(RESERVED))
        elif choice < 0.85:
            parts.append(random.choice(SPECIAL_CHARS))
        else:
            parts.append(random.choice(["\n", " ", "\t", "\r\n"]))
    return "".join(parts)


def fuzz_list():
    """Generate lists with items, sometimes stray."""
    tag = random.choice(LIST_TAGS)
    items = "".join(f"[{random.choice(['*', 'li'])}]{fuzz_text()}" for _ in range(random.randint(0, 5)))
    close = f"[/{tag}]" if random.random() < 0.8 else ""
    return f"[{tag}]{items}{close}"


def fuzz_table():
    """Generate tables with rows and cells in random order."""
    parts = []
    for _ in range(random.randint(1, 10)):
        tag = random.choice(TABLE_TAGS)
        if random.random() < 0.6:
            parts.append(f"[{tag}]")
        else:
            parts.append(f"[/{tag}]")
        if random.random() < 0.3:
            parts.append(fuzz_text())
    return "".join(parts)


def fuzz_nested_structure(depth=0, max_depth=8):
    """Generate nested structures with random closing order."""
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    inner = fuzz_nested_structure(depth + 1, max_depth)
    close_tag = random.choice([tag, random.choice(TAGS), ""])
    close = f"[/{close_tag}]" if close_tag else ""
    return f"[{tag}]{inner}{close}"


def fuzz_argument_tag():
    """Generate argument forms the converter does not parse."""
    tag = random.choice(ARGUMENT_TAGS)
    return f"[{tag}={random.choice(RESERVED + [random_string()])}]{fuzz_text()}[/{tag}]"


def generate_fuzzed_markup():
    """Generate a complete fuzzed document."""
    parts = []
    num_elements = random.randint(1, 20)
    for _ in range(num_elements):
        element_type = random.choices(
            [
                fuzz_open_tag,
                fuzz_close_tag,
                fuzz_text,
                fuzz_list,
                fuzz_table,
                fuzz_nested_structure,
                fuzz_argument_tag,
            ],
            weights=[20, 10, 20, 8, 8, 10, 4],
        )[0]
        parts.append(element_type())

    # Sometimes end mid-tag
    if random.random() < 0.2:
        parts.append(random.choice(["[", "[/", "[b", "[/qu", "[url="]))
    return "".join(parts)


def check_output(output):
    """Return a problem description, or None when the output looks sane."""
    if not isinstance(output, str):
        return f"returned {type(output).__name__}, not str"
    stripped = _EMITTED_TAG.sub("", output)
    if "<" in stripped or ">" in stripped:
        return "raw '<' or '>' outside emitted tags"
    opened = len(re.findall(r"<[a-z]+>", output))
    closed = len(re.findall(r"</[a-z]+>", output))
    if opened != closed:
        return f"{opened} opening tags but {closed} closing tags"
    return None


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer against the converter."""
    from bbhtml import convert

    if seed is not None:
        random.seed(seed)

    crashes = []
    hangs = []
    successes = 0

    print(f"Fuzzing bbhtml with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        markup = generate_fuzzed_markup()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            result = convert(markup)
            elapsed = time.perf_counter() - start

            problem = check_output(result)
            if problem:
                raise AssertionError(problem)

            # Check for hangs (>5 seconds)
            if elapsed > 5.0:
                hangs.append({
                    "test_num": i,
                    "markup": markup,
                    "time": elapsed,
                })
                if verbose:
                    print(f"  HANG: Test {i} took {elapsed:.2f}s")
            else:
                successes += 1

        except Exception as e:
            crashes.append({
                "test_num": i,
                "markup": markup,
                "error": str(e),
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")

    elapsed_total = time.time() - start_time

    # Report results
    print(f"\n{'='*60}")
    print("FUZZING RESULTS: bbhtml")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    if elapsed_total:
        print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    if crashes:
        print(f"\n{'='*60}")
        print("CRASH DETAILS:")
        print(f"{'='*60}")
        for crash in crashes[:10]:  # Show first 10
            print(f"\nTest #{crash['test_num']}:")
            print(f"  Markup: {crash['markup'][:200]!r}...")
            print(f"  Error: {crash['error']}")
        if len(crashes) > 10:
            print(f"\n... and {len(crashes) - 10} more crashes")

    if hangs:
        print(f"\n{'='*60}")
        print("HANG DETAILS:")
        print(f"{'='*60}")
        for hang in hangs[:5]:
            print(f"\nTest #{hang['test_num']} ({hang['time']:.2f}s):")
            print(f"  Markup: {hang['markup'][:200]!r}...")

    if save_failures and (crashes or hangs):
        filename = f"fuzz_failures_bbhtml_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write("Fuzzing results for bbhtml\n")
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"Markup:\n{crash['markup']}\n")
                f.write(f"Error: {crash['error']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"Markup:\n{hang['markup']}\n\n")
        print(f"\nFailures saved to {filename}")

    return len(crashes) == 0 and len(hangs) == 0


def main():
    parser = argparse.ArgumentParser(description="Fuzz the BBCode converter with invalid input")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed documents (no conversion)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_markup())
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
