#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
This script analyzes the name fields of CSV records (or names, one per line) for a range of problems,
e.g. mojibake, titles, stray punctuation, non-Latin scripts, multi-token names.
When using STDIN and/or STDOUT, if might be necessary, particularly for older versions of Python, to do
'export PYTHONIOENCODING=UTF-8' before calling this Python script to ensure UTF-8 encoding.
"""
# -*- encoding: utf-8 -*-

import argparse
import io
import json
import time
import datetime
from collections import defaultdict
import logging as log
from pathlib import Path
import re
import regex
import sys
from tqdm.auto import tqdm
from typing import Dict, Iterable, List, Optional, TextIO
import unicodeblock.blocks
from namefixer.nf_normalize import NameFixer, NormalizationOptions
from namefixer.nf_records import NAME_FIELDS, read_records, resolve_field
from namefixer import __version__, last_mod_date


log.basicConfig(level=log.INFO)

# issue -> description (in order of output)
ISSUES = {'empty': 'Empty names',
          'mojibake': 'Names with mojibake characters',
          'encoding-repaired': 'Names with repairable encoding errors',
          'mojibake-unrepaired': 'Names with unrepaired mojibake characters',
          'non-latin-script': 'Names in non-Latin scripts',
          'latin-extended': 'Names with accented letters',
          'title': 'Names with titles',
          'punctuation': 'Names with stray punctuation',
          'multi-token': 'Names with multiple tokens',
          'changed': 'Names changed by normalization'}


class NameFieldAnalysis:
    """
    Object stores raw and aggregate information of a name field analysis.
    Final results are stored in self.analysis
    """
    def __init__(self, args, verbose: Optional[bool] = False):
        self.name_fixer = NameFixer()
        self.options = NormalizationOptions()
        self.verbose = verbose
        self.filename = None
        self.max_n_examples = args.max_examples
        self.issue_count = defaultdict(lambda: defaultdict(int))   # field -> issue -> count
        self.issue_examples = defaultdict(lambda: defaultdict(list))  # field -> issue -> [[name, norm_name, loc]]
        self.block_count = defaultdict(int)
        self.block_examples = defaultdict(list)  # values are lists of lists(name, record number)
        self.char_to_block_dict = {}
        self.analysis = {'n_records': 0,
                         'n_names': 0,
                         'field': defaultdict(dict),
                         'block': defaultdict(dict)}

    def unicode_block(self, char: str) -> str:
        """Safe version of character to Unicode block. Example: 'a' -> 'BASIC_LATIN'"""
        if block_name := self.char_to_block_dict.get(char):
            return block_name
        try:
            block_name = unicodeblock.blocks.of(char) or 'OTHER'
        except ValueError:
            block_name = '_UNDEFINED_'
        self.char_to_block_dict[char] = block_name
        return block_name

    def add_issue(self, field: str, issue: str, name: str, norm_name: str, loc_id: str) -> None:
        self.issue_count[field][issue] += 1
        if len(self.issue_examples[field][issue]) < self.max_n_examples:
            self.issue_examples[field][issue].append([name, norm_name, loc_id])

    def issues_of_name(self, name: str, norm_name: str) -> List[str]:
        """Issues of a single name, given its normalized form, e.g. ['mojibake', 'encoding-repaired', 'changed']"""
        nf = self.name_fixer
        if not name.strip():
            return ['empty']
        issues = []
        repaired_name = nf.repair_mojibake(name)
        if nf.contains_suspicious_marker(name):
            issues.append('mojibake')
        if repaired_name != name:
            issues.append('encoding-repaired')
        if nf.contains_suspicious_marker(repaired_name):
            issues.append('mojibake-unrepaired')
        lv = nf.char_type_vector(repaired_name)
        if nf.is_foreign_script_vector(lv):
            issues.append('non-latin-script')
        else:
            if lv & nf.char_is_latin_or_greek_extended:
                issues.append('latin-extended')
            if nf.strip_titles(repaired_name, lv=lv) != repaired_name:
                issues.append('title')
        if nf.strip_punctuation(repaired_name) != nf.collapse_whitespace(repaired_name):
            issues.append('punctuation')
        if len(nf.name_tokens(repaired_name)) >= 2:
            issues.append('multi-token')
        if norm_name != name:
            issues.append('changed')
        return issues

    def collect_counts_and_examples_in_record(self, record: Dict[str, str], record_number: int) -> None:
        for field, (role, aliases) in NAME_FIELDS.items():
            name = resolve_field(record, aliases)
            self.collect_counts_and_examples_in_name(name, field, role, str(record_number))

    def collect_counts_and_examples_in_name(self, name: str, field: str, role: Optional[str], loc_id: str) -> None:
        self.analysis['n_names'] += 1
        norm_name = self.name_fixer.norm_name_field(name, self.options, role=role)
        issues = self.issues_of_name(name, norm_name)
        for issue in issues:
            self.add_issue(field, issue, name, norm_name, loc_id)
        for char in set(name):
            if char.isspace() or char.isascii():
                continue
            block = self.unicode_block(char)
            self.block_count[block] += 1
            if len(self.block_examples[block]) < self.max_n_examples \
                    and [name, loc_id] not in self.block_examples[block]:
                self.block_examples[block].append([name, loc_id])

    def collect_counts_and_examples_in_records(self, records: Iterable[Dict[str, str]], total: Optional[int] = None,
                                               progress_bar: bool = True) -> None:
        """Collect counts and examples for all name fields of records."""
        record_number = 0
        st = time.time()
        prefix = 'Checking'
        with tqdm(records, total=total, disable=not progress_bar, unit='rec', dynamic_ncols=True,
                  desc=prefix) as data_bar:
            for record in data_bar:
                record_number += 1
                if progress_bar:
                    record_speed = int(record_number / max(time.time() - st, 1e-6))
                    data_bar.set_postfix_str(f'{record_speed}R/s', refresh=False)
                self.collect_counts_and_examples_in_record(record, record_number)
        self.analysis['n_records'] = record_number

    def collect_counts_and_examples_in_lines(self, lines: Iterable[str], role: Optional[str] = None) -> None:
        """Names, one per line."""
        field = {'first': 'first_name', 'last': 'last_name'}.get(role, 'name')
        line_number = 0
        for line in lines:
            line_number += 1
            self.collect_counts_and_examples_in_name(line.rstrip('\r\n'), field, role, str(line_number))
        self.analysis['n_records'] = line_number

    def aggregate(self) -> None:
        """Aggregate raw counts and examples into self.analysis"""
        for field in self.issue_count.keys():
            for issue in ISSUES.keys():
                if count := self.issue_count[field].get(issue):
                    self.analysis['field'][field][issue] = {'count': count,
                                                            'ex': self.issue_examples[field][issue]}
        for block in sorted(self.block_count.keys(), key=lambda b: self.block_count[b], reverse=True):
            self.analysis['block'][block] = {'count': self.block_count[block],
                                             'ex': self.block_examples[block]}

    @staticmethod
    def format_examples(examples: list) -> str:
        """e.g. 'Ã˜revik (2) -> Orevik; Dr. John (5) -> John'"""
        result = []
        for example in examples:
            if len(example) == 3:
                name, norm_name, loc_id = example
                result.append(f'{name} ({loc_id}) -> {norm_name}')
            else:
                name, loc_id = example
                result.append(f'{name} ({loc_id})')
        return '; '.join(result)

    def pretty_print(self, output_file: TextIO) -> None:
        """Output name field analysis in human-readable format."""
        output_file.write("OVERVIEW:\n")
        output_file.write(f"Size: {count_plus_noun(self.analysis['n_records'], 'record')}, "
                          f"{count_plus_noun(self.analysis['n_names'], 'name')}\n")
        for field, field_dict in self.analysis['field'].items():
            output_file.write(f"Field {field}:\n")
            for issue, issue_dict in field_dict.items():
                output_file.write(f"    {ISSUES[issue]}: {issue_dict['count']}\n")
        if n_blocks := len(self.analysis['block']):
            output_file.write(f"Non-ASCII Unicode blocks: {n_blocks}\n")
            for block, block_dict in self.analysis['block'].items():
                output_file.write(f"    {block} ({count_plus_noun(block_dict['count'], 'name')})\n")
        output_file.write("DETAILS:\n")
        for field, field_dict in self.analysis['field'].items():
            for issue, issue_dict in field_dict.items():
                if issue == 'empty':
                    continue
                try:
                    output_file.write(f"{field} {issue}: {self.format_examples(issue_dict['ex'])}\n")
                except UnicodeError as error:
                    sys.stderr.write(f"*** Unicode error: {error}\n")
        for block, block_dict in self.analysis['block'].items():
            try:
                output_file.write(f"{block}: {self.format_examples(block_dict['ex'])}\n")
            except UnicodeError as error:
                sys.stderr.write(f"*** Unicode error: {error}\n")

    def summary_list_of_issues(self) -> List[str]:
        """List of major issues found in analysis, for a 1-line summary, useful for multi-file input"""
        result = []
        for issue in ISSUES.keys():
            if issue in ('empty', 'changed', 'mojibake'):
                continue
            count = sum(field_dict.get(issue, {}).get('count', 0) for field_dict in self.analysis['field'].values())
            if count:
                result.append(f"{ISSUES[issue][0].lower()}{ISSUES[issue][1:]} ({count})")
        n_changed = sum(field_dict.get('changed', {}).get('count', 0)
                        for field_dict in self.analysis['field'].values())
        result.append(f"{count_plus_noun(n_changed, 'name')} changed")
        return result


def plural_noun_form(noun: str) -> str:
    """Quick and dirty plural form, e.g. 'entry' -> 'entries'"""
    if noun.endswith('y'):
        return regex.sub(r'y$', 'ies', noun)
    else:
        return noun + 's'


def count_plus_noun(count: int, noun: str) -> str:
    """Quick and dirty count + plural form, e.g. (2, 'entry') -> '2 entries'"""
    return f'{count} {noun if count == 1 else plural_noun_form(noun)}'


def process_args(args) -> NameFieldAnalysis:
    """Perform name field analysis for 1 file, using argparse args."""
    nfa = NameFieldAnalysis(args)
    if args.input is sys.stdin:
        args.input = io.TextIOWrapper(sys.stdin.buffer, encoding='utf-8-sig', errors='surrogateescape')
        if not re.search('utf-8', sys.stdin.encoding, re.IGNORECASE):
            log.error(f"Bad STDIN encoding '{sys.stdin.encoding}' as opposed to 'utf-8'. "
                      f"Suggestion: 'export PYTHONIOENCODING=UTF-8' or use '--input FILENAME' option")
    elif args.input:
        inp_path = args.input
        assert isinstance(inp_path, Path)
        if not inp_path.exists():
            raise ValueError(f"{inp_path} does not exist.")
        args.input = open(inp_path, 'r', encoding='utf-8-sig', errors='surrogateescape', newline='')
        nfa.filename = inp_path

    if args.output is sys.stdout and not re.search('utf-8', sys.stdout.encoding, re.IGNORECASE):
        log.error(f"Error: Bad STDIN/STDOUT encoding '{sys.stdout.encoding}' as opposed to 'utf-8'. \
                        Suggestion: 'export PYTHONIOENCODING=UTF-8' or use use '--output FILENAME' option")
    role = None if args.role == 'none' else args.role
    if args.input:
        if args.lines:
            nfa.collect_counts_and_examples_in_lines(args.input, role=role)
        else:
            records = read_records(args.input)
            nfa.collect_counts_and_examples_in_records(records, total=len(records), progress_bar=args.progress_bar)
        if args.input is not sys.stdin and nfa.filename:
            args.input.close()
    elif args.records is not None:
        nfa.collect_counts_and_examples_in_records(args.records, progress_bar=args.progress_bar)
    elif args.strings is not None:
        nfa.collect_counts_and_examples_in_lines(args.strings, role=role)
    else:  # nothing to process
        log.warning('Called function process_args with neither args.input, args.records nor args.strings')
    nfa.aggregate()  # Aggregate raw counts and examples into analysis.
    if args.json:
        args.json.write(json.dumps(nfa.analysis) + "\n")
    if args.summary:
        args.output.write(f"{args.file_id}: {'; '.join(nfa.summary_list_of_issues())}\n")
    elif args.output:
        nfa.pretty_print(args.output)
    if args.output:
        args.output.flush()
    return nfa


def process(in_file: Optional[str] = None,     # provide exactly one input: input filename, records or strings
            records: Optional[List[Dict[str, str]]] = None,
            strings: Optional[List[str]] = None,
            role: Optional[str] = None,            # for strings and line input: 'first', 'last' or None
            lines: bool = False,                   # input file has one name per line (as opposed to CSV)
            pp_output: Optional[TextIO] = None,    # output filename (for pretty-print)
            json_output: Optional[TextIO] = None,  # output filename (in json)
            max_examples: int = 5) -> NameFieldAnalysis:
    """Entry point for name field analysis for non-CLI use; maps to CLI interface"""
    return process_args(argparse.Namespace(input=Path(in_file) if in_file else None,
                                           records=records, strings=strings, role=role or 'none', lines=lines,
                                           output=pp_output, json=json_output, max_examples=max_examples,
                                           summary=None, file_id=None, progress_bar=None))


def main():
    """Wrapper around name field analysis that takes care of argument parsing."""
    parser = argparse.ArgumentParser(description='Analyzes the name fields of CSV records for a range of problems',
                                     prog="nf-ana")
    parser.add_argument('-i', '--input', type=Path,
                        default=sys.stdin, metavar='INPUT-FILENAME', help='(default: STDIN)')
    parser.add_argument('--lines', action='store_true', default=False,
                        help='input has one name per line (default: CSV with header)')
    parser.add_argument('--role', type=str, default='none', choices=['first', 'last', 'none'],
                        help='role of names in line input')
    parser.add_argument('-s', '--summary', action='count', default=0, help='single summary line per file')
    parser.add_argument('-o', '--output', type=argparse.FileType('w', encoding='utf-8', errors='ignore'),
                        default=sys.stdout, metavar='OUTPUT-FILENAME', help='(default: STDOUT)')
    parser.add_argument('-j', '--json', type=argparse.FileType('w', encoding='utf-8', errors='ignore'),
                        default=None, metavar='JSON-OUTPUT-FILENAME', help='(default: None)')
    parser.add_argument('--file_id', type=str, default=None)
    parser.add_argument('-v', '--verbose', action='count', default=0, help='write log info to STDERR')
    parser.add_argument('-pb', '--progress_bar', action='store_true', default=False, help='Show progress bar')
    parser.add_argument('-x', '--max_examples', type=int, default=5, help='max number of examples per issue')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__} last modified: {last_mod_date}')
    parser.add_argument('--records', default=None, help=argparse.SUPPRESS)
    parser.add_argument('--strings', default=None, help=argparse.SUPPRESS)
    args = parser.parse_args()
    start_time = datetime.datetime.now()
    if args.verbose:
        log.info('Script: nf_analysis.py')
        log.info(f'Start: {start_time}')
        if args.input is not sys.stdin:
            log.info(f'Input: {args.input}')
        if args.output is not sys.stdout:
            log.info(f'Output: {args.output.name}')
    if args.summary and not args.file_id:
        args.file_id = args.input.name if isinstance(args.input, Path) else 'STDIN'
    process_args(args)
    if args.verbose:
        end_time = datetime.datetime.now()
        log.info(f'End: {end_time}')
        elapsed_time = end_time - start_time
        log.info(f'Time: {elapsed_time}')


if __name__ == "__main__":
    main()
