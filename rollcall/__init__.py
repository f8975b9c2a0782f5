"""
rollcall — rekonstrukcja arkuszy głosowań imiennych.

Moduły:
  lexicon   — RollCallLexicon (słowniki literalne jako dane), DEFAULT_LEXICON
  names     — dekoder pionowych bloków nazwisk
  bills     — parser tabeli projektów (maszyna stanów)
  speaker   — strategie ustalania przewodniczącego
  assembler — składanie rekordów i potok dokumentu
"""

from .lexicon import DEFAULT_LEXICON, RollCallLexicon, load_lexicon
from .assembler import assemble_bill, parse_rollcall_document, parse_rollcall_text

__all__ = [
    "DEFAULT_LEXICON",
    "RollCallLexicon",
    "load_lexicon",
    "assemble_bill",
    "parse_rollcall_document",
    "parse_rollcall_text",
]
