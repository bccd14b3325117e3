from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..engine.board import STARTPOS_FEN


logger = logging.getLogger(__name__)

RESULT_TOKENS = ("1-0", "0-1", "1/2-1/2", "*")

_TAG_RE = re.compile(r'^\[\s*([A-Za-z0-9_]+)\s+"(.*)"\s*\]$')
_COMMENT_RE = re.compile(r"\{[^}]*\}")
_LINE_COMMENT_RE = re.compile(r";[^\n]*")
_VARIATION_RE = re.compile(r"\([^()]*\)")
_MOVE_NUMBER_RE = re.compile(r"\d+\.+")
_NAG_RE = re.compile(r"\$\d+")
_DECORATION_RE = re.compile(r"[+#]")


@dataclass
class ParsedGame:
    """Tag pairs, start position, SAN tokens and result of one PGN game."""

    tags: Dict[str, str] = field(default_factory=dict)
    initial_fen: str = STARTPOS_FEN
    moves: List[str] = field(default_factory=list)
    result: Optional[str] = None


def parse_pgn(text: str) -> ParsedGame:
    """Split a single-game PGN into tags, move tokens and result.

    Args:
        text (str): PGN text; a tag block followed by movetext.

    Returns:
        ParsedGame: Parsed container. ``initial_fen`` comes from the ``FEN``
            tag when present, the standard start otherwise.

    Notes:
        Tag lines that do not match ``[Key "Value"]`` are skipped. Movetext
        loses ``{}`` and ``;`` comments, ``()`` variations (nested too), move
        numbers, NAGs and ``+``/``#`` marks before tokenizing. A trailing
        result token is moved into ``result``.
    """
    tags: Dict[str, str] = {}
    movetext_lines: List[str] = []
    parsing_tags = True

    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        if parsing_tags:
            if line.startswith("[") and line.endswith("]"):
                m = _TAG_RE.match(line)
                if m:
                    tags[m.group(1)] = m.group(2)
                else:
                    logger.debug("skipping malformed tag line %r", line)
                continue
            parsing_tags = False
        movetext_lines.append(line)

    tokens = tokenize_movetext("\n".join(movetext_lines))
    result: Optional[str] = None
    if tokens and tokens[-1] in RESULT_TOKENS:
        result = tokens.pop()

    initial_fen = tags.get("FEN", STARTPOS_FEN)
    return ParsedGame(tags=tags, initial_fen=initial_fen, moves=tokens, result=result)


def tokenize_movetext(movetext: str) -> List[str]:
    """Clean movetext and split it into SAN tokens (result token included)."""
    text = _COMMENT_RE.sub(" ", movetext)
    text = _LINE_COMMENT_RE.sub(" ", text)
    # Innermost variations first until none are left
    while True:
        stripped = _VARIATION_RE.sub(" ", text)
        if stripped == text:
            break
        text = stripped
    text = _MOVE_NUMBER_RE.sub(" ", text)
    text = _NAG_RE.sub(" ", text)
    text = _DECORATION_RE.sub("", text)
    return text.split()


def split_pgn_games(text: str) -> List[ParsedGame]:
    """Parse a multi-game PGN file.

    A new game starts at a tag line that follows movetext. Blocks that
    contain neither tags nor moves are dropped.
    """
    chunks: List[List[str]] = []
    current: List[str] = []
    seen_movetext = False
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("[") and seen_movetext:
            chunks.append(current)
            current = []
            seen_movetext = False
        if line and not line.startswith("["):
            seen_movetext = True
        current.append(raw)
    chunks.append(current)

    games: List[ParsedGame] = []
    for chunk in chunks:
        game = parse_pgn("\n".join(chunk))
        if game.tags or game.moves or game.result is not None:
            games.append(game)
    logger.debug("split %d games from PGN text", len(games))
    return games


def build_pgn(game: ParsedGame, *, numbered: bool = False) -> str:
    """Serialize ``game`` back to PGN text.

    Tags are written sorted by key, followed by a blank line, the move
    tokens joined by spaces and the result when known. With ``numbered``
    white moves are prefixed by their move number; when the ``FEN`` tag
    gives black the first move it is written as ``N...``. Numbering starts at
    the tag's fullmove field, or 1.
    """
    lines: List[str] = []
    for key, value in sorted(game.tags.items()):
        lines.append(f'[{key} "{value}"]')
    if lines:
        lines.append("")

    fen_fields = game.tags.get("FEN", "").split()
    black_first = len(fen_fields) >= 2 and fen_fields[1].lower() == "b"
    first_number = 1
    if len(fen_fields) >= 6 and fen_fields[5].isascii() and fen_fields[5].isdigit():
        first_number = max(int(fen_fields[5]), 1)

    parts: List[str] = []
    for i, san in enumerate(game.moves):
        ply = i + 1 if black_first else i
        number = first_number + ply // 2
        if numbered and ply % 2 == 0:
            parts.append(f"{number}.")
        elif numbered and i == 0:
            parts.append(f"{number}...")
        parts.append(san)
    if game.result is not None:
        parts.append(game.result)
    lines.append(" ".join(parts))
    return "\n".join(lines)
