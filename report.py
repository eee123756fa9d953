"""
Text report for an assembled source unit: symbol table, location table
and program length.
"""

from assembler import OPTAB, parse_line, strip_extended, first_operand, hexstr

RULE = "-" * 66
BANNER = "=" * 46
COLUMNS = f"{'LINE':<15} {'LOC':<15} {'SOURCE STATEMENT':<25} {'OBJECT CODE':<15}"


def preview_code(opcode_value, address):
    """Short listing preview (opcode << 16 | address), not the object word."""
    return hexstr((opcode_value << 16) | address, 6)


def symbol_rows(symtab):
    """Yield (line, address, symbol) in definition order."""
    for line, (name, address) in enumerate(symtab.items(), start=1):
        yield line, address, name


def location_rows(lines, symtab, loctab, optab=None):
    """Yield (line, loc, source, preview) for each resolvable instruction line."""
    optab = OPTAB if optab is None else optab
    line = 1
    for source_line in lines:
        stmt = parse_line(source_line)
        if not stmt or not stmt.opcode:
            continue
        _, mnemonic = strip_extended(stmt.opcode)
        if mnemonic not in optab:
            continue
        address = symtab.get(first_operand(stmt))
        if address is None:
            continue
        yield line, loctab.get(stmt.opcode), source_line.rstrip(), preview_code(optab[mnemonic]['opcode'], address)
        line += 1


def format_report(source, lines, symtab, loctab, program_length, optab=None):
    out = [f"Tables for Input File: {source}", BANNER, "Symbol Table:", RULE, COLUMNS]
    for line, address, name in symbol_rows(symtab):
        out.append(f"{line:<15} {hexstr(address, 4):<15} {name:<25} {'':<15}".rstrip())

    out += ["", "Location Table:", RULE, COLUMNS]
    for line, loc, text, code in location_rows(lines, symtab, loctab, optab):
        loc_str = hexstr(loc, 4) if loc is not None else ""
        out.append(f"{line:<15} {loc_str:<15} {text:<25} {code:<15}".rstrip())

    out += ["", f"Program Length: {hexstr(program_length, 4)}", BANNER, ""]
    return "\n".join(out)


def format_result(result, optab=None):
    """Render an AssemblyResult, or its error line when it failed."""
    if result.error_kind is not None:
        return f"{result.source}: {result.error_kind.value}: {result.error}\n"
    text = format_report(result.source, result.lines, result.symtab, result.loctab,
                         result.program_length, optab)
    if result.unresolved:
        text += "Unresolved operands:\n"
        text += "".join(f"  line {lineno}: {operand or '(none)'}\n" for lineno, operand in result.unresolved)
    return text
