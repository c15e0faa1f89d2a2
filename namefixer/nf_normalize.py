#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
This script repairs and normalizes human names, one name per line (details below).
Examples:
  nf_normalize.py -h  # for full usage info
  nf_normalize.py --version
  nf_normalize.py --role last -i last_names.txt -o last_names.clean.txt
  nf_normalize.py --preserve-accents --verbose < names.txt > names.clean.txt

Normalization steps (applied in this order):
 * repair-encoding (repairs mojibake, i.e. UTF-8 misread as Windows-1252 or Latin-1, incl. double conversion,
                    as well as missing conversion from Windows-1252/Latin-1 to UTF-8)
 * strip-titles (deletes titles and suffixes such as Dr., Prof., PMP, Esq., Jr.)
 * strip-punct (deletes leading and trailing punctuation and hyphens of each token)
 * to-ascii (maps letters to ASCII, e.g. Ø -> O, é -> e; deletes special characters)
 * capitalize (e.g. o'connor-smith -> O'Connor-Smith)
 * select-token (first token for given names, last token for family names, e.g. FAIZAL-ABAS -> Faizal)
Names in non-Latin scripts (CJK, Hangul, Kana, Cyrillic, Arabic) are only repaired and stripped of
leading and trailing punctuation.
When using STDIN and/or STDOUT, if might be necessary, particularly for older versions of Python, to do
'export PYTHONIOENCODING=UTF-8' before calling this Python script to ensure UTF-8 encoding.
"""
# -*- encoding: utf-8 -*-
import argparse
from itertools import chain
import datetime
import logging as log
import os
from pathlib import Path
import re
import regex
import sys
from typing import Callable, List, NamedTuple, Optional, TextIO
import unicodedata as ud
from namefixer import __version__, last_mod_date


log.basicConfig(level=log.INFO)
data_dir = Path(__file__).parent / 'data'
data_dir_path = str(data_dir.resolve())

# Source encodings tried (in this order) when re-decoding a misencoded string as UTF-8.
CANDIDATE_ENCODINGS = ('latin_1', 'cp1252', 'cp1250', 'iso8859_15')
# Characters that typically show up when UTF-8 bytes are displayed through a single-byte code page.
SUSPICIOUS_MARKERS = 'ÃÂâËðþÿ'  # Ã Â â Ë ð þ ÿ
PUNCTUATION_CHARS = '.,;:!?~`\'"()[]{}'
# Typographic quotes and apostrophes (incl. repaired ones such as â€˜ -> ‘), also deleted at token boundaries.
QUOTE_CHARS = '‘’‚‛“”„«»ʼʹ´'


class NormalizationOptions(NamedTuple):
    preserve_accents: bool = False       # keep repaired accented letters, e.g. Ørevik
    remove_special_chars: bool = True    # delete all but letters, digits, space, hyphen, apostrophe
    case_sensitive: bool = False         # do not lowercase
    capitalize_first: bool = True        # capitalize each token
    remove_titles: bool = True           # delete titles such as Dr., PMP, Jr.
    clean_punctuation: bool = True       # delete leading/trailing punctuation of each token
    take_first_token_only: bool = True   # given name: keep first token only
    take_last_token_only: bool = True    # family name: keep last token only
    keep_original: bool = False          # records: keep changed original values in *_original columns


class NameFixer:
    # noinspection PyPep8
    def __init__(self, observer: Optional[Callable[[str, str, str, str], None]] = None):
        # observer(step_name, before, after, loc_id) is called after each normalization step.
        self.observer = observer
        self.all_norm_steps = ['repair-encoding', 'strip-titles', 'strip-punct', 'to-ascii', 'capitalize',
                               'select-token']
        # Windows-1252 characters (beyond Latin-1) that show up in misencoded punctuation.
        self.repair_punct_code_points = [0x02C6, 0x02DC, 0x2013, 0x2014, 0x2018, 0x2019, 0x201A, 0x201C, 0x201D,
                                         0x201E, 0x2020, 0x2021, 0x2022, 0x2026, 0x2030, 0x2039, 0x203A, 0x20AC,
                                         0x2122]
        self.char_type_vector_dict = {}
        # Initialize elementary bit vectors (integers each with a different bit set) used in bitwise operations.
        bit_vector = 1
        self.char_is_latin_extended = bit_vector  # accented Latin letters etc., not ASCII
        bit_vector = bit_vector << 1
        self.char_is_greek = bit_vector
        bit_vector = bit_vector << 1
        self.char_is_cyrillic = bit_vector
        bit_vector = bit_vector << 1
        self.char_is_cjk = bit_vector
        bit_vector = bit_vector << 1
        self.char_is_hangul = bit_vector
        bit_vector = bit_vector << 1
        self.char_is_kana = bit_vector  # Hiragana, Katakana
        bit_vector = bit_vector << 1
        self.char_is_arabic = bit_vector  # includes Arabic presentation forms
        bit_vector = bit_vector << 1
        self.char_is_suspicious_marker = bit_vector
        bit_vector = bit_vector << 1
        self.char_is_encoding_repair_anchor = bit_vector
        bit_vector = bit_vector << 1
        self.char_is_decomposable_letter = bit_vector  # ligatures and letters such as Ø, ß
        bit_vector = bit_vector << 1
        self.char_is_surrogate = bit_vector
        # Combined vectors
        self.char_is_non_latin = (self.char_is_cyrillic | self.char_is_cjk | self.char_is_hangul
                                  | self.char_is_kana | self.char_is_arabic)
        self.char_is_latin_or_greek_extended = self.char_is_latin_extended | self.char_is_greek
        self.range_init_char_type_vector_dict()
        #
        # Initialize mapping dictionary, which maps misencoded strings (of length 1-12 characters)
        # to repaired strings (mostly of length 1).
        self.mapping_dict = {}
        self.init_mapping_dict()
        self.mapping_re = self.build_mapping_re()
        self.letter_mapping_dict = {}
        self.load_letter_mapping_file()
        self.letter_trantab = str.maketrans(self.letter_mapping_dict)
        self.title_dict = {}  # section (e.g. 'medical') -> list of titles
        self.load_title_file()
        self.title_re = self.build_title_re()

    def set_char_type_vector(self, char: str, bit_vector: int) -> None:
        self.char_type_vector_dict[char] = self.char_type_vector_dict.get(char, 0) | bit_vector

    def range_init_char_type_vector_dict(self) -> None:
        # Latin extended (Latin-1 Supplement letters, Latin Extended-A/B, Latin Extended Additional)
        for code_point in chain(range(0x00C0, 0x00D7), range(0x00D8, 0x00F7), range(0x00F8, 0x0250),
                                range(0x1E00, 0x1F00)):
            self.set_char_type_vector(chr(code_point), self.char_is_latin_extended)
        # Greek
        for code_point in chain(range(0x0370, 0x0400), range(0x1F00, 0x2000)):
            self.set_char_type_vector(chr(code_point), self.char_is_greek)
        # Cyrillic
        for code_point in chain(range(0x0400, 0x0530), range(0x1C80, 0x1C90), range(0x2DE0, 0x2E00),
                                range(0xA640, 0xA6A0)):
            self.set_char_type_vector(chr(code_point), self.char_is_cyrillic)
        # CJK unified ideographs (incl. extensions A and B) and compatibility ideographs
        for code_point in chain(range(0x3400, 0x4DC0), range(0x4E00, 0xA000), range(0xF900, 0xFB00),
                                range(0x20000, 0x2A6E0)):
            self.set_char_type_vector(chr(code_point), self.char_is_cjk)
        # Hangul jamo, compatibility jamo, syllables
        for code_point in chain(range(0x1100, 0x1200), range(0x3130, 0x3190), range(0xA960, 0xA980),
                                range(0xAC00, 0xD7B0), range(0xD7B0, 0xD800)):
            self.set_char_type_vector(chr(code_point), self.char_is_hangul)
        # Hiragana, Katakana, Katakana phonetic extensions, halfwidth Katakana
        for code_point in chain(range(0x3040, 0x3100), range(0x31F0, 0x3200), range(0xFF66, 0xFFA0)):
            self.set_char_type_vector(chr(code_point), self.char_is_kana)
        # Arabic
        for code_point in chain(range(0x0600, 0x0700), range(0x0750, 0x0780), range(0x08A0, 0x0900),
                                range(0xFB50, 0xFE00), range(0xFE70, 0xFEFF)):
            self.set_char_type_vector(chr(code_point), self.char_is_arabic)
        # Surrogates (representing non-UTF8 bytes in input read with errors='surrogateescape')
        for code_point in range(0xDC80, 0xDD00):
            self.set_char_type_vector(chr(code_point), self.char_is_surrogate | self.char_is_encoding_repair_anchor)
        for char in SUSPICIOUS_MARKERS:
            self.set_char_type_vector(char, self.char_is_suspicious_marker)

    def char_type_vector(self, s: str) -> int:
        """Bit vector of all character types in s, e.g. char_is_cyrillic | char_is_latin_extended"""
        lv = 0
        for char in s:
            char_type_vector = self.char_type_vector_dict.get(char, 0)
            if char_type_vector:
                lv = lv | char_type_vector
        return lv

    def is_non_latin_script(self, s: str) -> bool:
        """True if s contains any Cyrillic, CJK, Hangul, Kana or Arabic character."""
        return bool(self.char_type_vector(s or '') & self.char_is_non_latin)

    def is_latin_extended(self, s: str) -> bool:
        """True if s contains any accented (non-ASCII) Latin letter or Greek letter."""
        return bool(self.char_type_vector(s or '') & self.char_is_latin_or_greek_extended)

    def is_foreign_script_vector(self, lv: int) -> bool:
        """Mixed-script strings are treated as foreign-script, i.e. the non-Latin part wins."""
        return bool(lv & self.char_is_non_latin)

    def set_mapping_dict(self, key: str, value: str, index: int, byte_string: Optional[bytes], loc: str,
                         verbose: bool = False) -> None:
        self.mapping_dict[key] = value
        self.set_char_type_vector(key[0], self.char_is_encoding_repair_anchor)
        if verbose:
            log.info(f'map-{loc} {index} {key} -> {value}   byte_string:{byte_string}')

    # noinspection SpellCheckingInspection
    def init_mapping_dict(self, undef_default: str = '') -> None:
        """Initialize mapping_dict that maps from various misencodings to proper UTF8."""
        # Missing conversion from Windows1252/Latin1 to UTF8 (non-UTF8 bytes read in as surrogate characters)
        for index in range(0x80, 0x100):
            surrogate_char = chr(index + 0xDC00)
            try:
                self.set_mapping_dict(surrogate_char, bytes([index]).decode('cp1252'), index, None, 's1')
            except UnicodeDecodeError:  # x81,x8D,x8F,x90,x9D are unassigned in Windows-1252
                self.set_mapping_dict(surrogate_char, undef_default, index, None, 's2')
        # UTF8 misread as Windows1252 or Latin1, e.g. 'Ã©' -> 'é', 'Ã˜' -> 'Ø', 'â€™' -> '’'
        for code_point in chain(range(0x00A0, 0x0250), range(0x1E00, 0x1F00), self.repair_punct_code_points):
            char = chr(code_point)
            byte_string = char.encode('utf-8')
            for source_encoding in ('cp1252', 'latin_1'):
                try:
                    misencoded_s = byte_string.decode(source_encoding)
                except UnicodeDecodeError:
                    continue
                if misencoded_s != char:
                    self.set_mapping_dict(misencoded_s, char, code_point, byte_string, source_encoding)
        # Observed misencodings that can't be generated above, e.g. truncated or double conversions
        tsv_filename = 'EncodingRepairMapping.tsv'
        full_tsv_filename = os.path.join(data_dir_path, tsv_filename)
        try:
            with open(full_tsv_filename, 'r', encoding='utf-8', errors='ignore') as f:
                line_number = 0
                for line in f:
                    line_number += 1
                    tsv_list = re.split(r'\t', line.rstrip('\r\n'))
                    if (len(tsv_list) >= 2) and (line_number >= 2):
                        self.set_mapping_dict(tsv_list[0], tsv_list[1], line_number, None, 'tsv')
        except FileNotFoundError:
            log.error(f"Could not open {full_tsv_filename}")

    def build_mapping_re(self) -> re.Pattern:
        """Single pattern over all misencoded strings. Longer strings are tried first."""
        keys = sorted(self.mapping_dict.keys(), key=lambda k: (-len(k), k))
        return re.compile('|'.join(re.escape(key) for key in keys))

    def apply_mapping_dict(self, match: re.Match) -> str:
        """Maps substring resulting from misencoding to repaired UTF8."""
        s = match.group()
        if s in self.mapping_dict:
            return self.mapping_dict[s]
        else:
            return s

    def load_letter_mapping_file(self) -> None:
        """Loads letters without a Unicode decomposition to plain ASCII, e.g. 'Ø' -> 'O', 'ß' -> 'ss'"""
        full_tsv_filename = os.path.join(data_dir_path, 'LetterMapping.tsv')
        try:
            with open(full_tsv_filename, 'r', encoding='utf-8') as f:
                line_number = 0
                for line in f:
                    line_number += 1
                    tsv_list = re.split(r'\t', line.rstrip('\r\n'))
                    if (len(tsv_list) >= 2) and (line_number >= 2) and (len(tsv_list[0]) == 1):
                        self.letter_mapping_dict[tsv_list[0]] = tsv_list[1]
                        self.set_char_type_vector(tsv_list[0], self.char_is_decomposable_letter)
        except FileNotFoundError:
            log.error(f"Could not open {full_tsv_filename}")

    def load_title_file(self) -> None:
        """Loads titles, e.g. 'dr', 'prof', 'his excellency', grouped by section (e.g. 'medical')."""
        title_filename = os.path.join(data_dir_path, 'titles.txt')
        section = 'other'
        try:
            with open(title_filename, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if m := re.match(r'::section\s+(\S+)', line):
                        section = m.group(1)
                    elif line and not line.startswith('#'):
                        self.title_dict.setdefault(section, []).append(line.lower())
        except FileNotFoundError:
            log.error(f"Could not open {title_filename}")

    def build_title_re(self):
        titles = set(chain.from_iterable(self.title_dict.values()))
        if not titles:
            return None
        # Multi-word titles (e.g. 'his excellency') before single words, longer before shorter.
        titles = sorted(titles, key=lambda t: (-len(t.split()), -len(t), t))
        alternatives = [r'\s+'.join(regex.escape(word) for word in title.split()) for title in titles]
        return regex.compile(rf"(?<!\w)(?:{'|'.join(alternatives)})\.?(?!\w)", regex.IGNORECASE)

    @staticmethod
    def collapse_whitespace(s: str) -> str:
        return regex.sub(r'\s+', ' ', s).strip()

    def contains_suspicious_marker(self, s: str) -> bool:
        return bool(self.char_type_vector(s) & self.char_is_suspicious_marker)

    def redecode(self, s: str) -> str:
        """
        Reinterpret the characters of s as bytes in a candidate source encoding and decode those bytes as UTF-8.
        Returns the first decoding that changes s and leaves no replacement character or suspicious marker,
        otherwise s itself.
        """
        for encoding in CANDIDATE_ENCODINGS:
            try:
                decoded_s = s.encode(encoding).decode('utf-8', errors='replace')
            except (UnicodeError, LookupError):
                continue
            if (decoded_s != s) and ('�' not in decoded_s) and not self.contains_suspicious_marker(decoded_s):
                return decoded_s
        return s

    def repair_mojibake(self, s: str) -> str:
        """
        Repairs strings that were encoded in UTF-8 but decoded as Windows-1252/Latin-1 (sometimes twice),
        e.g. 'Ã˜revik' -> 'Ørevik', 'BJÃ–RN' -> 'BJÖRN', 'ÃƒËœrevik' -> 'Ørevik'.
        Known misencodings are replaced first; if suspicious characters such as 'Ã' remain,
        the string is re-decoded under the CANDIDATE_ENCODINGS. Best effort, never raises.
        """
        if not s:
            return ''
        if self.char_type_vector(s) & self.char_is_encoding_repair_anchor:
            s = self.mapping_re.sub(self.apply_mapping_dict, s)
        if self.contains_suspicious_marker(s):
            s = self.redecode(s)
        return s

    def strip_titles(self, s: str, lv: Optional[int] = None) -> str:
        """Deletes titles such as 'Dr.', 'PMP', 'his excellency', 'Jr' (whole words only, case-insensitive)."""
        if not s:
            return ''
        if lv is None:
            lv = self.char_type_vector(s)
        if self.is_foreign_script_vector(lv) or self.title_re is None:
            return s
        result = self.collapse_whitespace(self.title_re.sub(' ', s))
        # A name consisting of nothing but a title (e.g. 'Sir') is kept as is.
        if not regex.search(r'\w', result):
            return s
        return result

    @staticmethod
    def strip_punctuation(s: str) -> str:
        """Deletes leading and trailing punctuation and hyphens of each token, e.g. '(John),' -> 'John'"""
        if not s:
            return ''
        tokens = []
        for token in s.split():
            token = token.strip(PUNCTUATION_CHARS + QUOTE_CHARS + '-')
            if token:
                tokens.append(token)
        return ' '.join(tokens)

    @staticmethod
    def normalize_apostrophes(s: str) -> str:
        # right/left single quotation mark, modifier letter apostrophe/prime, acute accent, grave accent
        return regex.sub(r'[‘’‛ʼʹ´`]', "'", s)

    def to_ascii(self, s: str, preserve_accents: bool = False, remove_special_chars: bool = True,
                 lv: Optional[int] = None) -> str:
        """
        Maps letters to ASCII, e.g. 'Frédéric' -> 'Frederic', 'Ørevik' -> 'Orevik', 'Strauß' -> 'Strauss'.
        Ligatures and letters without a decomposition are mapped using LetterMapping.tsv, all others are
        decomposed (NFD) and stripped of their combining diacritics.
        With remove_special_chars, anything but ASCII letters (or any letters if preserve_accents),
        digits, spaces, hyphens and apostrophes is deleted.
        Strings in non-Latin scripts are returned unchanged.
        """
        if not s:
            return ''
        if lv is None:
            lv = self.char_type_vector(s)
        if self.is_foreign_script_vector(lv):
            return s
        s = self.normalize_apostrophes(s)
        if preserve_accents:
            s = ud.normalize('NFC', s)
        else:
            if lv & self.char_is_decomposable_letter:
                s = s.translate(self.letter_trantab)
            s = regex.sub(r'\p{M}', '', ud.normalize('NFD', s))
        if remove_special_chars:
            if preserve_accents:
                s = regex.sub(r"[^\p{L}\p{M}0-9\s\-']", '', s)
            else:
                s = regex.sub(r"[^A-Za-z0-9\s\-']", '', s)
            s = regex.sub(r'\s+', ' ', s)
        return s

    @staticmethod
    def capitalize_part(part: str, case_sensitive: bool = False) -> str:
        if not part:
            return part
        return part[0].upper() + (part[1:] if case_sensitive else part[1:].lower())

    def capitalize(self, s: str, case_sensitive: bool = False) -> str:
        """
        Capitalizes each word, e.g. 'morten orevik' -> 'Morten Orevik'.
        Parts of words with apostrophes or hyphens are capitalized separately, e.g. 'o'connor-smith' -> 'O'Connor-Smith'
        """
        if not s:
            return ''
        words = []
        for word in re.split(r'\s+', s):
            if ("'" in word) or ('-' in word):
                word = ''.join(self.capitalize_part(part, case_sensitive) for part in re.split(r"([-'])", word))
            else:
                word = self.capitalize_part(word, case_sensitive)
            words.append(word)
        return ' '.join(words)

    @staticmethod
    def name_tokens(s: str) -> List[str]:
        return [token for token in regex.split(r'[\s\-]+', s or '') if token]

    def select_first(self, s: str, capitalize: bool = True, case_sensitive: bool = False) -> str:
        """Canonical given name, e.g. 'FAIZAL-ABAS' -> 'Faizal', 'Faizal Shaikh' -> 'Faizal'"""
        tokens = self.name_tokens(s)
        if not tokens:
            return ''
        return self.capitalize(tokens[0], case_sensitive) if capitalize else tokens[0]

    def select_last(self, s: str, capitalize: bool = True, case_sensitive: bool = False) -> str:
        """Canonical family name, e.g. 'Shah-shah-shash' -> 'Shash'"""
        tokens = self.name_tokens(s)
        if not tokens:
            return ''
        return self.capitalize(tokens[-1], case_sensitive) if capitalize else tokens[-1]

    def norm_letters(self, s: str, options: NormalizationOptions, lv: int) -> str:
        result = self.to_ascii(s, preserve_accents=options.preserve_accents,
                               remove_special_chars=options.remove_special_chars, lv=lv)
        if (not result.strip()) and s.strip() and not options.preserve_accents:
            # e.g. Greek or Hebrew names have no ASCII rendition; keep the letters rather than the empty string.
            result = self.to_ascii(s, preserve_accents=True, remove_special_chars=options.remove_special_chars,
                                   lv=lv)
        return result

    def norm_case(self, s: str, options: NormalizationOptions) -> str:
        if not options.case_sensitive:
            s = s.lower()
        if options.capitalize_first:
            s = self.capitalize(s, case_sensitive=options.case_sensitive)
        return s

    def select_token(self, s: str, options: NormalizationOptions, role: Optional[str]) -> str:
        if role == 'first' and options.take_first_token_only:
            return self.select_first(s, capitalize=options.capitalize_first, case_sensitive=options.case_sensitive)
        if role == 'last' and options.take_last_token_only:
            return self.select_last(s, capitalize=options.capitalize_first, case_sensitive=options.case_sensitive)
        return s

    @staticmethod
    def increment_dict_count(ht: dict, key: str, increment=1) -> int:
        """For example ht['NUMBER-OF-FIELDS']"""
        ht[key] = ht.get(key, 0) + increment
        return ht[key]

    def nf_step(self, s: str, ht: dict, step_name: str, step_function: Callable[[str], str], loc_id: str) -> str:
        """
        For a given normalization step, call appropriate function, update stats and notify any observer.
        """
        self.increment_dict_count(ht, f'CALL-{step_name}')  # keep track of how often norm-step is called
        orig_s = s
        s = step_function(s)
        if s != orig_s:
            count_key = f'COUNT-{step_name}'
            count = self.increment_dict_count(ht, count_key)
            if loc_id and (count <= 20):
                ht[f'{count_key}-{count}'] = loc_id
        if self.observer:
            self.observer(step_name, orig_s, s, loc_id)
        return s

    def norm_name_field(self, s: str, options: Optional[NormalizationOptions] = None, role: Optional[str] = None,
                        ht: Optional[dict] = None, loc_id: str = '') -> str:
        """
        Repairs and normalizes one name field.
        role: 'first' (given name), 'last' (family name) or None (no token selection)
        ht: optional dictionary that accumulates change statistics across calls
        """
        if options is None:
            options = NormalizationOptions()
        if ht is None:
            ht = {}
        self.increment_dict_count(ht, 'NUMBER-OF-FIELDS')
        if not s:
            return ''
        orig_s = s
        s = self.nf_step(s, ht, 'repair-encoding', self.repair_mojibake, loc_id)
        lv = self.char_type_vector(s)  # script classification for the rest of the pipeline
        if self.is_foreign_script_vector(lv):
            if options.clean_punctuation:
                s = self.nf_step(s, ht, 'strip-punct', self.strip_punctuation, loc_id)
        else:
            if options.remove_titles:
                s = self.nf_step(s, ht, 'strip-titles', lambda x: self.strip_titles(x, lv=lv), loc_id)
            if options.clean_punctuation:
                s = self.nf_step(s, ht, 'strip-punct', self.strip_punctuation, loc_id)
            s = self.nf_step(s, ht, 'to-ascii', lambda x: self.norm_letters(x, options, lv), loc_id)
            s = self.nf_step(s, ht, 'capitalize', lambda x: self.norm_case(x, options), loc_id)
            if role in ('first', 'last'):
                s = self.nf_step(s, ht, 'select-token', lambda x: self.select_token(x, options, role), loc_id)
        s = self.collapse_whitespace(s)
        if s != orig_s:
            self.increment_dict_count(ht, 'COUNT-ALL')
        return s

    def norm_name_lines(self, ht: dict, input_file: TextIO, output_file: TextIO,
                        options: Optional[NormalizationOptions] = None, role: Optional[str] = None) -> None:
        """Apply normalization to a file (or STDIN/STDOUT) with one name per line."""
        line_number = 0
        for line in input_file:
            line_number += 1
            output_file.write(self.norm_name_field(line.rstrip('\r\n'), options, role=role, ht=ht,
                                                   loc_id=str(line_number))
                              + "\n")

    def change_stats(self, ht: dict, unit: str = 'field') -> str:
        """e.g. '2 out of 3 fields changed; repair-encoding in 1/3 fields; to-ascii in 1/3 fields'"""
        change_count = ht.get('COUNT-ALL', 0)
        number_of_fields = ht.get('NUMBER-OF-FIELDS', 0)
        units = unit if number_of_fields == 1 else f'{unit}s'
        log_info = f"{str(change_count)} out of {str(number_of_fields)} {units} changed"
        for norm_step in self.all_norm_steps:
            n_changed = ht.get(f'COUNT-{norm_step}', 0)
            n_calls = ht.get(f'CALL-{norm_step}', 0)
            if n_changed:
                units = unit if n_changed == 1 else f'{unit}s'
                log_info += f'; {norm_step} in {str(n_changed)}/{str(n_calls)} {units}'
        return log_info


def log_change(step_name: str, before: str, after: str, loc_id: str) -> None:
    """Observer for verbose mode: logs every change made by a normalization step."""
    if before != after:
        log.info(f'   {step_name} {loc_id}: {before} -> {after}')


def add_norm_option_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--preserve-accents', action='store_true', default=False,
                        help='keep (repaired) accented letters, e.g. Ørevik instead of Orevik')
    parser.add_argument('--keep-special-chars', action='store_true', default=False,
                        help='do not delete characters other than letters, digits, space, hyphen, apostrophe')
    parser.add_argument('--case-sensitive', action='store_true', default=False, help='do not lowercase')
    parser.add_argument('--no-capitalize', action='store_true', default=False, help='do not capitalize tokens')
    parser.add_argument('--keep-titles', action='store_true', default=False,
                        help='do not delete titles such as Dr., PMP, Jr.')
    parser.add_argument('--keep-punctuation', action='store_true', default=False,
                        help='do not delete leading/trailing punctuation of tokens')
    parser.add_argument('--all-tokens', action='store_true', default=False,
                        help='do not reduce given/family names to their first/last token')


def norm_options_from_args(args: argparse.Namespace) -> NormalizationOptions:
    return NormalizationOptions(preserve_accents=args.preserve_accents,
                                remove_special_chars=not args.keep_special_chars,
                                case_sensitive=args.case_sensitive,
                                capitalize_first=not args.no_capitalize,
                                remove_titles=not args.keep_titles,
                                clean_punctuation=not args.keep_punctuation,
                                take_first_token_only=not args.all_tokens,
                                take_last_token_only=not args.all_tokens,
                                keep_original=getattr(args, 'keep_original', False))


def main():
    """Wrapper around name normalization that takes care of argument parsing and prints change stats to STDERR."""
    parser = argparse.ArgumentParser(description='Repairs and normalizes human names, one name per line',
                                     prog="nf-norm")
    parser.add_argument('-i', '--input', type=argparse.FileType('r', encoding='utf-8', errors='surrogateescape'),
                        default=sys.stdin, metavar='INPUT-FILENAME', help='(default: STDIN)')
    parser.add_argument('-o', '--output', type=argparse.FileType('w', encoding='utf-8', errors='ignore'),
                        default=sys.stdout, metavar='OUTPUT-FILENAME', help='(default: STDOUT)')
    parser.add_argument('--role', type=str, default='none', choices=['first', 'last', 'none'],
                        help="'first': keep first token (given name); 'last': keep last token (family name)")
    add_norm_option_arguments(parser)
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='write change stats to STDERR (-vv: also each change)')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__} last modified: {last_mod_date}')
    args = parser.parse_args()
    options = norm_options_from_args(args)
    role = None if args.role == 'none' else args.role

    # Make sure utf-8 encoding is properly set (in older Python3 versions).
    if args.input is sys.stdin and not re.search('utf-8', sys.stdin.encoding, re.IGNORECASE):
        log.error(f"Bad STDIN encoding '{sys.stdin.encoding}' as opposed to 'utf-8'. \
                    Suggestion: 'export PYTHONIOENCODING=UTF-8' or use '--input FILENAME' option")
    if args.output is sys.stdout and not re.search('utf-8', sys.stdout.encoding, re.IGNORECASE):
        log.error(f"Error: Bad STDIN/STDOUT encoding '{sys.stdout.encoding}' as opposed to 'utf-8'. \
                    Suggestion: 'export PYTHONIOENCODING=UTF-8' or use use '--output FILENAME' option")

    nf = NameFixer(observer=log_change if args.verbose >= 2 else None)
    start_time = datetime.datetime.now()
    if args.verbose:
        log.info(f'Start: {start_time}')
        log.info('Script nf_normalize.py')
        if args.input is not sys.stdin:
            log.info(f'Input: {args.input.name}')
        if args.output is not sys.stdout:
            log.info(f'Output: {args.output.name}')
        log.info(f'Options: {options}')
    ht = {}
    # The following line is the core call. ht collects change stats.
    nf.norm_name_lines(ht, input_file=args.input, output_file=args.output, options=options, role=role)
    if args.verbose:
        log.info(nf.change_stats(ht, unit='line'))
        end_time = datetime.datetime.now()
        log.info(f'End: {end_time}')
        elapsed_time = end_time - start_time
        log.info(f'Time: {elapsed_time}')


if __name__ == "__main__":
    main()
