#!/usr/bin/env python3
# -*- encoding: utf-8 -*-
"""
Pytest for nf_analysis.py
"""

import argparse
import io
import json
import logging as log
import pytest
import namefixer.nf_analysis as nf_ana

log.basicConfig(level=log.INFO)

records = [{'first_name': 'Dr. John', 'last_name': 'Ã˜revik'},
           {'firstName': '王', 'lastName': ''}]


def test_record_analysis():
    nfa = nf_ana.process(records=records)
    assert nfa.analysis['n_records'] == 2
    assert nfa.analysis['n_names'] == 4
    first_name_dict = nfa.analysis['field']['first_name']
    last_name_dict = nfa.analysis['field']['last_name']
    assert first_name_dict['title']['count'] == 1
    assert first_name_dict['punctuation']['count'] == 1
    assert first_name_dict['non-latin-script']['ex'] == [['王', '王', '2']]
    assert last_name_dict['encoding-repaired']['ex'] == [['Ã˜revik', 'Orevik', '1']]
    assert last_name_dict['empty']['count'] == 1
    assert 'mojibake-unrepaired' not in last_name_dict
    assert len(nfa.analysis['block']) >= 2


def test_summary():
    nfa = nf_ana.process(records=records)
    summary = nfa.summary_list_of_issues()
    assert 'names with titles (1)' in summary
    assert 'names in non-Latin scripts (1)' in summary
    assert summary[-1] == '2 names changed'


def test_string_analysis_and_output():
    pp_output = io.StringIO()
    json_output = io.StringIO()
    nfa = nf_ana.process(strings=['BJÃ–RN', 'Anna', 'JOÃO'], role='first', pp_output=pp_output,
                         json_output=json_output)
    assert nfa.analysis['field']['first_name']['encoding-repaired']['count'] == 1
    assert nfa.analysis['field']['first_name']['mojibake-unrepaired']['ex'] == [['JOÃO', 'Joao', '3']]
    assert pp_output.getvalue().startswith('OVERVIEW:\nSize: 3 records, 3 names\n')
    assert 'DETAILS:\n' in pp_output.getvalue()
    assert json.loads(json_output.getvalue())['n_names'] == 3


def test_missing_input_file(tmp_path):
    with pytest.raises(ValueError):
        nf_ana.process(in_file=str(tmp_path / 'missing.csv'))


def test_count_plus_noun():
    assert nf_ana.count_plus_noun(1, 'entry') == '1 entry'
    assert nf_ana.count_plus_noun(2, 'entry') == '2 entries'
    assert nf_ana.count_plus_noun(0, 'name') == '0 names'


def test_names_are_normalized_once(monkeypatch):
    nfa = nf_ana.NameFieldAnalysis(argparse.Namespace(max_examples=5))
    calls = []
    norm_name_field = nfa.name_fixer.norm_name_field

    def counting_norm_name_field(*args, **kwargs):
        calls.append(args[0])
        return norm_name_field(*args, **kwargs)
    monkeypatch.setattr(nfa.name_fixer, 'norm_name_field', counting_norm_name_field)
    nfa.collect_counts_and_examples_in_records(records, progress_bar=False)
    assert calls == ['Dr. John', 'Ã˜revik', '王', '']
    assert nfa.issue_count['last_name']['changed'] == 1
