#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
This script repairs and normalizes the given and family names of CSV records.
Examples:
  nf_records.py -h  # for full usage info
  nf_records.py -i contacts.csv -o contacts.clean.csv --keep-original
  nf_records.py --preserve-accents -pb < contacts.csv > contacts.clean.csv
Given names are read from the first non-empty column among FIRST_NAME_ALIASES (e.g. 'firstName', 'First Name'),
family names from LAST_NAME_ALIASES. Both are written to the columns 'first_name' and 'last_name'.
All other columns are passed through unchanged. Output is UTF-8 with a byte order mark, all fields quoted.
"""
# -*- encoding: utf-8 -*-
import argparse
import csv
import datetime
import logging as log
from pathlib import Path
import sys
import time
from tqdm.auto import tqdm
from typing import Dict, Iterable, Iterator, List, Optional, TextIO
from namefixer.nf_normalize import NameFixer, NormalizationOptions, add_norm_option_arguments, \
    norm_options_from_args, log_change
from namefixer import __version__, last_mod_date


log.basicConfig(level=log.INFO)

FIRST_NAME_ALIASES = ('first_name', 'firstName', 'FirstName', 'First_Name', 'First Name', 'first')
LAST_NAME_ALIASES = ('last_name', 'lastName', 'LastName', 'Last_Name', 'Last Name', 'last')
# output column -> (role, header aliases)
NAME_FIELDS = {'first_name': ('first', FIRST_NAME_ALIASES),
               'last_name': ('last', LAST_NAME_ALIASES)}

_default_name_fixer = None


def default_name_fixer() -> NameFixer:
    """Shared NameFixer (tables are loaded once and never modified afterwards)."""
    global _default_name_fixer
    if _default_name_fixer is None:
        _default_name_fixer = NameFixer()
    return _default_name_fixer


def resolve_field(row: Dict[str, str], aliases: Iterable[str]) -> str:
    """Value of the first alias column that is present with a non-empty value, otherwise ''."""
    for alias in aliases:
        value = row.get(alias)
        if value and value.strip():
            return value
    return ''


def norm_record(row: Dict[str, str], options: Optional[NormalizationOptions] = None, nf: Optional[NameFixer] = None,
                ht: Optional[dict] = None, loc_id: str = '') -> Dict[str, str]:
    """
    Returns a copy of row with normalized 'first_name' and 'last_name'.
    With options.keep_original, any changed name is also kept in 'first_name_original'/'last_name_original'.
    """
    if options is None:
        options = NormalizationOptions()
    if nf is None:
        nf = default_name_fixer()
    result = dict(row)
    for key, (role, aliases) in NAME_FIELDS.items():
        orig_value = resolve_field(row, aliases)
        value = nf.norm_name_field(orig_value, options, role=role, ht=ht,
                                   loc_id=f'{loc_id}:{key}' if loc_id else key)
        result[key] = value
        if options.keep_original and (value != orig_value):
            result[f'{key}_original'] = orig_value
    return result


def norm_records(rows: Iterable[Dict[str, str]], options: Optional[NormalizationOptions] = None,
                 nf: Optional[NameFixer] = None, ht: Optional[dict] = None,
                 progress_bar: bool = False, total: Optional[int] = None) -> Iterator[Dict[str, str]]:
    """Normalizes a stream of records, preserving their order. Records are processed independently."""
    if nf is None:
        nf = default_name_fixer()
    if ht is None:
        ht = {}
    st = time.time()
    prefix = 'Normalizing'
    with tqdm(rows, total=total, disable=not progress_bar, unit='rec', dynamic_ncols=True, desc=prefix) as data_bar:
        record_number = 0
        for row in data_bar:
            record_number += 1
            if progress_bar:
                record_speed = int(record_number / max(time.time() - st, 1e-6))
                data_bar.set_postfix_str(f'{record_speed}R/s', refresh=False)
            ht['NUMBER-OF-RECORDS'] = record_number
            yield norm_record(row, options, nf=nf, ht=ht, loc_id=str(record_number))


def read_records(input_file: TextIO) -> List[Dict[str, str]]:
    """Reads CSV records with a header line. Values are stripped; a leading BOM is ignored."""
    reader = csv.DictReader(input_file)
    records = []
    for row in reader:
        row.pop(None, None)  # surplus values in rows longer than the header
        records.append({key.strip().lstrip('\ufeff'): (value or '').strip() for key, value in row.items()})
    return records


def output_fieldnames(records: List[Dict[str, str]], header: Optional[List[str]] = None) -> List[str]:
    """Input header, followed by 'first_name', 'last_name' and any '*_original' columns (if not already present)."""
    fieldnames = list(header or [])
    for record in records:
        for key in record.keys():
            if key not in fieldnames and not key.endswith('_original'):
                fieldnames.append(key)
    for key in NAME_FIELDS.keys():
        if key not in fieldnames:
            fieldnames.append(key)
    for key in NAME_FIELDS.keys():
        original_key = f'{key}_original'
        if original_key not in fieldnames and any(original_key in record for record in records):
            fieldnames.append(original_key)
    return fieldnames


def write_records(records: List[Dict[str, str]], output_file: TextIO, header: Optional[List[str]] = None,
                  bom: bool = True) -> None:
    """Writes CSV records, all fields quoted. The BOM helps spreadsheet software recognize UTF-8."""
    if bom:
        output_file.write('\ufeff')
    writer = csv.DictWriter(output_file, fieldnames=output_fieldnames(records, header), quoting=csv.QUOTE_ALL,
                            extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    for record in records:
        writer.writerow(record)


def process(rows: Optional[Iterable[Dict[str, str]]] = None,  # provide exactly one input: rows or input filename
            in_file: Optional[str] = None,
            out_file: Optional[str] = None,                   # optional output CSV filename
            options: Optional[NormalizationOptions] = None,
            progress_bar: bool = False,
            ht: Optional[dict] = None) -> List[Dict[str, str]]:
    """Entry point for record normalization for non-CLI use; returns the normalized records."""
    if in_file:
        inp_path = Path(in_file)
        if not inp_path.exists():
            raise FileNotFoundError(f"{inp_path} does not exist.")
        with open(inp_path, 'r', encoding='utf-8-sig', errors='surrogateescape', newline='') as f:
            rows = read_records(f)
    elif rows is None:
        log.warning('Called function process with neither rows nor in_file')
        rows = []
    else:
        rows = list(rows)
    records = list(norm_records(rows, options, ht=ht, progress_bar=progress_bar, total=len(rows)))
    if out_file:
        header = list(rows[0].keys()) if rows else None
        with open(out_file, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
            write_records(records, f, header=header)
    return records


def main():
    """Wrapper around record normalization that takes care of argument parsing and prints change stats to STDERR."""
    parser = argparse.ArgumentParser(description='Repairs and normalizes given and family names in CSV records',
                                     prog="nf-csv")
    parser.add_argument('-i', '--input', type=Path, default=None, metavar='INPUT-FILENAME', help='(default: STDIN)')
    parser.add_argument('-o', '--output', type=Path, default=None, metavar='OUTPUT-FILENAME',
                        help='(default: STDOUT)')
    add_norm_option_arguments(parser)
    parser.add_argument('--keep-original', action='store_true', default=False,
                        help="keep changed names in columns 'first_name_original' and 'last_name_original'")
    parser.add_argument('--no-bom', action='store_true', default=False, help='do not write a byte order mark')
    parser.add_argument('-pb', '--progress_bar', action='store_true', default=False, help='Show progress bar')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='write change stats to STDERR (-vv: also each change)')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__} last modified: {last_mod_date}')
    args = parser.parse_args()
    options = norm_options_from_args(args)
    start_time = datetime.datetime.now()
    if args.verbose:
        log.info(f'Start: {start_time}')
        log.info('Script nf_records.py')
        if args.input:
            log.info(f'Input: {args.input}')
        if args.output:
            log.info(f'Output: {args.output}')
        log.info(f'Options: {options}')
    if args.input:
        if not args.input.exists():
            log.error(f"Could not open {args.input}")
            sys.exit(1)
        with open(args.input, 'r', encoding='utf-8-sig', errors='surrogateescape', newline='') as f:
            rows = read_records(f)
    else:
        rows = read_records(sys.stdin)
    nf = NameFixer(observer=log_change if args.verbose >= 2 else None)
    ht = {}
    records = list(norm_records(rows, options, nf=nf, ht=ht, progress_bar=args.progress_bar, total=len(rows)))
    header = list(rows[0].keys()) if rows else None
    if args.output:
        with open(args.output, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
            write_records(records, f, header=header, bom=not args.no_bom)
    else:
        write_records(records, sys.stdout, header=header, bom=not args.no_bom)
    if args.verbose:
        log.info(f"{ht.get('NUMBER-OF-RECORDS', 0)} records; {nf.change_stats(ht)}")
        end_time = datetime.datetime.now()
        log.info(f'End: {end_time}')
        elapsed_time = end_time - start_time
        log.info(f'Time: {elapsed_time}')


if __name__ == "__main__":
    main()
