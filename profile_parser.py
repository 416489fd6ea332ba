#!/usr/bin/env python3
"""Profile the BBCode converter to find performance bottlenecks."""

import cProfile
import io
import pstats

from bbhtml import Converter

# Sample markup
markup = """
[quote]Posted by [b]someone[/b] & friends[/quote]
[ul]
[*]Item [i]one[/i]
[*]Item two with <angle> brackets
[/ul]
[table]
[tr][th]Name[/th][th]Value[/th][/tr]
[tr][td]alpha[/td][td]1 < 2[/td][/tr]
[/table]
[code]if (a && b) { return [[x]; }[/code]
Stray [li]item[/li], [unknown]tag[/unknown] and [url=http://example.com]link[/url].
""" * 100  # Repeat for more meaningful results

# Profile
pr = cProfile.Profile()
pr.enable()

converter = Converter()
for _ in range(10):
    result = converter.run(markup)

pr.disable()

# Print stats
s = io.StringIO()
ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
ps.print_stats(50)  # Top 50 functions
print(s.getvalue())
