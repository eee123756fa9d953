import re
import os
import sys
import logging
from collections import namedtuple
from enum import Enum
from pathlib import Path
import pandas as pd

logger = logging.getLogger(__name__)


class AssemblerError(Exception):
    """Base class for errors that abort assembly of a source unit."""


class SourceParseError(AssemblerError, ValueError):
    """A directive operand that must be numeric could not be converted."""

    def __init__(self, lineno, opcode, operand):
        self.lineno = lineno
        self.opcode = opcode
        self.operand = operand
        super().__init__(f"line {lineno}: invalid {opcode} operand: {operand!r}")


#load the opcode table
def load_optab(filename="optab.csv"):
    file_path = Path(filename)
    # resolve relative paths against the script directory
    if not file_path.is_absolute():
        local_path = Path(__file__).parent / file_path
        # a regular install puts the table under <prefix>/share
        shared_path = Path(sys.prefix) / "share" / "sicxe-assembler" / file_path
        file_path = local_path if local_path.exists() or not shared_path.exists() else shared_path

    # if not found, fail immediately
    if not file_path.exists():
        raise FileNotFoundError(f"optab file not found: {file_path}")

    # opcodes are hex text, keep them as strings ("0C" must not become 12)
    df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
    # strip whitespace from column names
    df.columns = df.columns.str.strip()

    optab = {}
    for idx, row in df.iterrows():
        name = str(row.get('name', '')).strip().upper()
        opcode_str = str(row.get('opcode', '')).strip()
        if not opcode_str:
            raise ValueError(f"Missing opcode for instruction '{name}' (row {idx}) in optab: {file_path}")
        try:
            opcode = int(opcode_str, 16)
        except ValueError:
            raise ValueError(f"Invalid hex opcode '{opcode_str}' for instruction '{name}' (row {idx}) in optab: {file_path}")
        formats = str(row.get('format', '')).strip()
        optab[name] = {'opcode': opcode, 'format': formats}
    return optab

OPTAB = load_optab()


# --- Line model ---
Statement = namedtuple("Statement", ["lineno", "label", "opcode", "operands"])

def parse_line(line, lineno=0):
    """Split a source line into label, opcode and operands.

    The first whitespace-delimited column is always the label, so a line
    that starts with whitespace has no label. Blank lines give None.
    """
    line = line.rstrip()
    if not line.strip():
        return None
    parts = re.split(r"\s+", line)
    label = parts[0] or None
    opcode = parts[1] if len(parts) > 1 else ""
    return Statement(lineno, label, opcode, tuple(parts[2:]))

def parse_source(lines):
    """Parse every non-blank line, numbering lines from 1."""
    statements = []
    for lineno, line in enumerate(lines, start=1):
        stmt = parse_line(line, lineno)
        if stmt:
            statements.append(stmt)
    return statements

def first_operand(stmt):
    return stmt.operands[0] if stmt.operands else None

def strip_extended(opcode):
    """Return (is_extended, mnemonic) for an opcode token."""
    if opcode.startswith('+'):
        return True, opcode[1:]
    return False, opcode

#turns int into 0 padded hex
def hexstr(value, width=6):
    return f"{value:0{width}X}"


# --- Directive classification ---
class Directive(Enum):
    END = "END"
    CSECT = "CSECT"
    USE = "USE"
    ENDUSE = "ENDUSE"
    RESW = "RESW"
    RESB = "RESB"
    BYTE = "BYTE"
    MEND = "MEND"
    BLOCK_BODY = "block body"
    START = "START"
    INSTRUCTION = "instruction"
    EMPTY = "empty"

# checked in this order, the first match wins
DIRECTIVE_ORDER = (
    Directive.END, Directive.CSECT, Directive.USE, Directive.ENDUSE,
    Directive.RESW, Directive.RESB, Directive.BYTE, Directive.MEND,
)

def classify(opcode, in_program_block=False):
    """Pick the single directive kind that governs a statement."""
    if not opcode:
        return Directive.EMPTY
    for kind in DIRECTIVE_ORDER:
        if opcode == kind.value:
            return kind
    # everything after this point is swallowed inside a USE block
    if in_program_block:
        return Directive.BLOCK_BODY
    if opcode == Directive.START.value:
        return Directive.START
    return Directive.INSTRUCTION


# --- Location counter helpers ---
DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
HEX_RE = re.compile(r"[+-]?[0-9A-Fa-f]+")

def parse_count(stmt):
    """Decimal operand of RESW/RESB, 0 when absent."""
    operand = first_operand(stmt)
    if operand is None:
        return 0
    # int() alone would also take "1_000"
    if not DECIMAL_RE.fullmatch(operand):
        raise SourceParseError(stmt.lineno, stmt.opcode, operand)
    return int(operand)

def handle_start_directive(stmt):
    """Parse START directive and return start address."""
    operand = first_operand(stmt)
    if operand is None:
        return 0
    # no "0x" prefix or digit separators
    if not HEX_RE.fullmatch(operand):
        raise SourceParseError(stmt.lineno, stmt.opcode, operand)
    return int(operand, 16)

def handle_resw_directive(stmt):
    """Calculate size of RESW directive (3 bytes per word)."""
    return 3 * parse_count(stmt)

def handle_resb_directive(stmt):
    """Calculate size of RESB directive."""
    return parse_count(stmt)

def handle_byte_directive(operand):
    """Calculate size of BYTE directive."""
    if not operand:
        return 0
    if operand.startswith("X'"):
        # X prefix and both quotes, two hex digits per byte
        return max(0, (len(operand) - 3) // 2)
    return max(0, len(operand) - 3)

def instruction_length(opcode):
    return 4 if opcode.startswith('+') else 3


class LocationState:
    """Location counter plus the section/block the assembler is inside.

    Both passes step this with advance() so the addresses Pass 2 assumes
    are the ones Pass 1 computed.
    """

    def __init__(self):
        self.locctr = 0
        self.in_csect = False
        self.csect = ""
        self.in_block = False
        self.block = ""
        self.program_length = None

    def qualify(self, label):
        """Scope a label by the active control section or program block."""
        if self.in_csect:
            return f"{self.csect}.{label}"
        if self.in_block:
            return f"{self.block}.{label}"
        return label

    def advance(self, stmt):
        """Apply one statement's effect and return its directive kind."""
        kind = classify(stmt.opcode, self.in_block)

        if kind is Directive.END:
            self.program_length = self.locctr
            self.in_csect = False
        elif kind is Directive.CSECT:
            self.locctr = 0
            self.in_csect = True
            self.csect = stmt.label or ""
        elif kind is Directive.USE:
            self.in_block = True
            self.block = first_operand(stmt) or ""
        elif kind is Directive.ENDUSE:
            self.in_block = False
            self.block = ""
        elif kind is Directive.RESW:
            self.locctr += handle_resw_directive(stmt)
        elif kind is Directive.RESB:
            self.locctr += handle_resb_directive(stmt)
        elif kind is Directive.BYTE:
            self.locctr += handle_byte_directive(first_operand(stmt))
        elif kind is Directive.START:
            self.locctr = handle_start_directive(stmt)
        elif kind is Directive.INSTRUCTION:
            self.locctr += instruction_length(stmt.opcode)
        # MEND, BLOCK_BODY and EMPTY leave the counter alone
        return kind


#PASS 1 - building the SYMTAB
Pass1Result = namedtuple("Pass1Result", ["symtab", "loctab", "program_length", "statements"])

def pass1(statements):
    symtab = {} #qualified label -> address
    loctab = {} #opcode -> location counter after the statement
    state = LocationState()

    for index, stmt in enumerate(statements):
        if stmt.label:
            scoped_label = state.qualify(stmt.label)
            if scoped_label in symtab:
                logger.warning("line %d: duplicate symbol %s ignored", stmt.lineno, scoped_label)
            else:
                symtab[scoped_label] = state.locctr

        if stmt.opcode == Directive.START.value and index > 0:
            logger.warning("line %d: START is not the first statement", stmt.lineno)

        kind = state.advance(stmt)
        if kind is not Directive.EMPTY:
            loctab[stmt.opcode] = state.locctr

    program_length = state.program_length
    if program_length is None:
        logger.warning("no END directive, program length taken from final location counter")
        program_length = state.locctr

    logger.debug("pass 1: %d symbols, program length %s", len(symtab), hexstr(program_length))
    return Pass1Result(symtab, loctab, program_length, statements)


#Pass 2 Helper Functions
def encode_object_word(opcode_value, displacement, extended=False):
    """Pack opcode, format flag and displacement into one 32-bit word."""
    format_flag = 1 if extended else 0
    return (opcode_value << 24) | (format_flag << 23) | (displacement & 0x7FFFFF)

#PASS 2 - generating object code
def pass2(statements, symtab, optab=None):
    """Return (object_words, unresolved) for a resolved source unit."""
    optab = OPTAB if optab is None else optab
    object_words = []
    unresolved = [] #(lineno, operand) pairs that produced no word
    state = LocationState()

    for stmt in statements:
        # address of this instruction, before its own length is added
        tloc = state.locctr
        state.advance(stmt)

        if not stmt.opcode:
            continue
        is_extended, mnemonic = strip_extended(stmt.opcode)
        if mnemonic not in optab:
            continue

        operand = first_operand(stmt)
        if operand is None:
            logger.debug("line %d: %s has no operand, no object code emitted", stmt.lineno, stmt.opcode)
            continue
        target_addr = symtab.get(operand)
        if target_addr is None:
            logger.warning("line %d: unresolved operand %s for %s, no object code emitted",
                           stmt.lineno, operand, stmt.opcode)
            unresolved.append((stmt.lineno, operand))
            continue

        disp = 0 if is_extended else target_addr - tloc
        obj = encode_object_word(optab[mnemonic]['opcode'], disp, is_extended)
        object_words.append(hexstr(obj, 8))

    logger.debug("pass 2: %d object words, %d unresolved", len(object_words), len(unresolved))
    return object_words, unresolved


# --- Driver ---
class ErrorKind(Enum):
    IO = "I/O error"
    PARSE = "parse error"

AssemblyResult = namedtuple("AssemblyResult", [
    "source", "lines", "symtab", "loctab", "program_length",
    "object_words", "unresolved", "object_path", "error_kind", "error",
])

def failed_result(source, error_kind, error, lines=()):
    return AssemblyResult(source, list(lines), {}, {}, 0, [], [], None, error_kind, str(error))

def assemble_source(lines, optab=None):
    """Run both passes over in-memory source lines.

    Returns (pass1_result, object_words, unresolved). SourceParseError
    from Pass 1 propagates and Pass 2 is not attempted.
    """
    statements = parse_source(lines)
    resolved = pass1(statements)
    object_words, unresolved = pass2(statements, resolved.symtab, optab)
    return resolved, object_words, unresolved

def write_object_file(path, object_words):
    """Write object words one per line, replacing the file in one step."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_text("".join(word + "\n" for word in object_words))
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

def assemble_file(input_file, output_dir=None, optab=None):
    """Assemble one source unit and write its object file.

    Errors are reported in the returned AssemblyResult rather than raised.
    """
    source = str(input_file)
    try:
        lines = Path(input_file).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("%s: cannot read source: %s", source, e)
        return failed_result(source, ErrorKind.IO, e)

    try:
        resolved, object_words, unresolved = assemble_source(lines, optab)
    except SourceParseError as e:
        logger.error("%s: %s", source, e)
        return failed_result(source, ErrorKind.PARSE, e, lines)

    out_dir = Path(output_dir) if output_dir else Path(input_file).parent
    object_path = out_dir / (Path(input_file).stem + ".obj")
    try:
        write_object_file(object_path, object_words)
    except OSError as e:
        logger.error("%s: cannot write object file %s: %s", source, object_path, e)
        return failed_result(source, ErrorKind.IO, e, lines)

    logger.info("%s: assembled, %d object words written to %s", source, len(object_words), object_path)
    return AssemblyResult(source, lines, resolved.symtab, resolved.loctab, resolved.program_length,
                          object_words, unresolved, object_path, None, None)

def assemble_files(input_files, output_dir=None, optab=None):
    """Assemble each unit independently; one failure never stops the rest."""
    return [assemble_file(f, output_dir, optab) for f in input_files]
