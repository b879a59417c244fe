"""
Tiny BASIC shell commands
pyparsing grammar for the direct commands typed at the interactive prompt
"""

from typing import NamedTuple, Optional

from pyparsing import (
    CaselessKeyword, QuotedString, Regex, StringEnd, ParseException,
)

from error_handling import command_error_from_exception


COMMAND_NAMES = ("RUN", "LIST", "NEW", "LOAD", "SAVE", "QUIT", "BYE", "EXIT")


class Command(NamedTuple):
    """A parsed shell command; path is set for LOAD and SAVE only"""
    name: str
    path: Optional[str] = None


class CommandGrammar:
    """Shell command grammar definition using pyparsing"""

    def __init__(self):
        self._setup_grammar()

    def _setup_grammar(self):
        # File names are either double-quoted or a single bare word
        quoted_path = QuotedString('"')
        bare_path = Regex(r'[^\s"]+')
        path = (quoted_path | bare_path)("path")

        run_cmd = CaselessKeyword("RUN")
        list_cmd = CaselessKeyword("LIST")
        new_cmd = CaselessKeyword("NEW")
        quit_cmd = (CaselessKeyword("QUIT") | CaselessKeyword("BYE") | CaselessKeyword("EXIT"))
        quit_cmd.set_parse_action(lambda t: "QUIT")

        load_cmd = CaselessKeyword("LOAD") + path
        save_cmd = CaselessKeyword("SAVE") + path

        command = (
            load_cmd |
            save_cmd |
            run_cmd |
            list_cmd |
            new_cmd |
            quit_cmd
        ) + StringEnd()

        self.command = command

    def parse_command(self, text: str) -> Command:
        """Parse one command line; raises BasicCommandError if malformed"""
        try:
            result = self.command.parse_string(text.strip(), parse_all=True)
        except ParseException as e:
            raise command_error_from_exception(e, text.strip()) from e
        path = result.get("path")
        return Command(result[0], path)


_grammar = CommandGrammar()


def is_command(text: str) -> bool:
    """True when the first word of the input names a shell command"""
    words = text.strip().split(None, 1)
    return bool(words) and words[0].upper() in COMMAND_NAMES


def parse_command(text: str) -> Optional[Command]:
    """
    Parse a shell command, or return None when the input is program text.
    A recognised command word with bad arguments raises BasicCommandError.
    """
    if not is_command(text):
        return None
    return _grammar.parse_command(text)
