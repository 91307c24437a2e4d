"""Tests for the "move" command and castling rights repair."""

import chess
import pytest
from conftest import CASTLING_FEN, make_position

from ucicore.board.position import STARTING_FEN
from ucicore.uci.loop import UCILoop
from ucicore.uci.speculative import CastlingRights, Flank, Outcome, drop_castling_rights, try_move

FOOLS_MATE_FEN = "rnb1kbnr/pppp1ppp/4p3/8/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
BLACK_MATED_FEN = "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
PAWNS_ON_FIRST_RANK_FEN = "4k3/8/8/8/8/8/8/P3K2P w - - 0 1"


class TestCastlingRights:
    """Tests for the structured castling rights."""

    def test_parse_and_print(self) -> None:
        """Rights print in KQkq order whatever the input order."""
        rights = CastlingRights.from_fen_field("qkQK")
        assert str(rights) == "KQkq"
        assert rights.has(chess.WHITE, Flank.KING)
        assert rights.has(chess.BLACK, Flank.QUEEN)

    def test_none(self) -> None:
        """Test the empty field."""
        rights = CastlingRights.from_fen_field("-")
        assert not rights.flags
        assert str(rights) == "-"

    def test_without(self) -> None:
        """Removing a right returns a new value."""
        rights = CastlingRights.from_fen_field("KQkq")
        fewer = rights.without(chess.WHITE, Flank.QUEEN)
        assert str(fewer) == "Kkq"
        assert str(rights) == "KQkq"

    def test_rook_file_letters_kept(self) -> None:
        """Shredder-style file letters pass through untouched."""
        rights = CastlingRights.from_fen_field("KBk")
        assert str(rights.without(chess.WHITE, Flank.KING)) == "kB"


class TestDropCastlingRights:
    """Tests for removing one side's rights from a FEN."""

    @pytest.mark.parametrize(
        ("field", "color", "expected"),
        [
            ("KQkq", chess.WHITE, "kq"),
            ("KQkq", chess.BLACK, "KQ"),
            ("Kkq", chess.WHITE, "kq"),
            ("Qkq", chess.WHITE, "kq"),
            ("Qk", chess.WHITE, "k"),
            ("KQ", chess.BLACK, "KQ"),
            ("q", chess.BLACK, "-"),
            ("-", chess.WHITE, "-"),
        ],
    )
    def test_drop(self, field: str, color: chess.Color, expected: str) -> None:
        """Test every combination of held rights."""
        fen = f"r3k2r/8/8/8/8/8/8/R3K2R w {field} - 0 1"
        assert drop_castling_rights(fen, color).split()[2] == expected

    def test_other_fields_untouched(self) -> None:
        """Only the castling field changes."""
        fen = "r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 3 17"
        assert drop_castling_rights(fen, chess.BLACK) == "r3k2r/8/8/8/8/8/8/R3K2R b KQ - 3 17"


class TestMoveCommand:
    """Tests for the "move" debug command."""

    def test_castling_drops_rights_only(self, uci: UCILoop, run) -> None:
        """Castling removes the mover's rights and leaves the board as it was."""
        uci.execute(f"position fen {CASTLING_FEN}")
        out = run("move e1g1")
        assert out == ""
        assert uci.pos.fen() == "r3k2r/8/8/8/8/8/8/R3K2R w kq - 0 1"
        assert len(uci.states) == 1

    def test_black_castling(self, uci: UCILoop) -> None:
        """Test black castling queenside."""
        uci.execute("position fen r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
        result = uci.make_move(iter(["e8c8"]))
        assert result.outcome is Outcome.APPLIED
        assert uci.pos.fen() == "r3k2r/8/8/8/8/8/8/R3K2R b KQ - 0 1"
        assert result.fen == uci.pos.fen()

    def test_castling_in_960_mode(self, uci: UCILoop) -> None:
        """In 960 mode the move is written king takes rook."""
        uci.execute("setoption name UCI_Chess960 value true")
        uci.execute(f"position fen {CASTLING_FEN}")
        result = uci.make_move(iter(["e1a1"]))
        assert result.outcome is Outcome.APPLIED
        assert uci.pos.fen().split()[2] == "kq"

    def test_normal_move_keeps_rights(self, uci: UCILoop, run) -> None:
        """A non-castling move leaves position and rights as they were."""
        uci.execute(f"position fen {CASTLING_FEN}")
        assert run("move e1f1") == ""
        assert uci.pos.fen() == CASTLING_FEN

    def test_start_position_unchanged(self, uci: UCILoop) -> None:
        """Test a pawn move from the start position."""
        result = uci.make_move(iter(["e2e4"]))
        assert result.outcome is Outcome.APPLIED
        assert uci.pos.fen() == STARTING_FEN

    def test_white_checkmated(self, uci: UCILoop, run) -> None:
        """A mated side to move ends the game for the other color."""
        uci.execute(f"position fen {FOOLS_MATE_FEN}")
        assert run("move e2e4") == "Game over: black wins\n"
        assert uci.pos.fen() == FOOLS_MATE_FEN

    def test_black_checkmated(self, uci: UCILoop) -> None:
        """Test the message when black is mated."""
        uci.execute(f"position fen {BLACK_MATED_FEN}")
        result = uci.make_move(iter(["h8g8"]))
        assert result.outcome is Outcome.CHECKMATE
        assert result.message == "Game over: white wins"

    def test_stalemate(self, uci: UCILoop, run) -> None:
        """Test the message for a stalemated side to move."""
        uci.execute(f"position fen {STALEMATE_FEN}")
        assert run("move h8g8") == "Game over: draw\n"

    def test_illegal_move(self, uci: UCILoop, run) -> None:
        """An undecodable move prints "Game over" and changes nothing."""
        assert run("move e2e5") == "Game over\n"
        assert uci.make_move(iter(["e2e5"])).outcome is Outcome.ILLEGAL_INPUT
        assert uci.make_move(iter([])).outcome is Outcome.ILLEGAL_INPUT
        assert uci.pos.fen() == STARTING_FEN

    def test_invalid_result(self, uci: UCILoop, run) -> None:
        """A move leaving an unsound position is refused."""
        uci.execute(f"position fen {PAWNS_ON_FIRST_RANK_FEN}")
        result = uci.make_move(iter(["e1d2"]))
        assert result.outcome is Outcome.INVALID_RESULT
        assert result.message == "Game over"
        assert uci.pos.fen() == PAWNS_ON_FIRST_RANK_FEN

    def test_trial_leaves_live_board_alone(self) -> None:
        """The trial move never touches the live board or its move stack."""
        pos = make_position(CASTLING_FEN)
        seen = []

        def reseed(tokens) -> None:
            seen.append((pos.fen(), len(pos.board.move_stack), list(tokens)))

        result = try_move(pos, "e1g1", reseed)

        assert result.outcome is Outcome.APPLIED
        assert seen == [(CASTLING_FEN, 0, ["fen", *result.fen.split()])]
        assert result.fen == "r3k2r/8/8/8/8/8/8/R3K2R w kq - 0 1"
