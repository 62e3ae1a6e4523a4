"""Rewrite legacy session levels stored as grade numbers.

Early histories recorded the word-list grade instead of the game level.
Such values are mapped back through the participant profile: reading
level → 1, midway grade → 2, grade level → 3. Values that match none of
these are left alone.

Only values outside 0..4 are touched, one record at a time. Every value in
0..4 is a real game level now that level 4 marks a target-word session, and
a low reading level or grade can collide with one. Remapping every matching
value once any record looks legacy would turn, say, a level-3 session of a
reader at grade 3 into level 1 and corrupt a clean history.
"""

from __future__ import annotations

