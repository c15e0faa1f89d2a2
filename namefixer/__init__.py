r"""NameFixer repairs and normalizes human names in CSV records and plain text.
Main modules: namefixer.nf_normalize, namefixer.nf_records, namefixer.nf_analysis
Argument help: nf_normalize.py -h, nf_records.py -h, nf_analysis.py -h; or, alternatively: nf-norm -h, nf-csv -h, nf-ana -h"""
__version__ = '0.3.1'
__description__ = '''The namefixer scripts repair and normalize human names, e.g. mojibake resulting from encoding errors, titles such as Dr. or PMP, stray punctuation, accented letters, inconsistent capitalization, and reduce given and family names to a single canonical token.'''
last_mod_date = 'October 18, 2026'
from . import nf_normalize, nf_records, nf_analysis
__all__ = [nf_normalize, nf_records, nf_analysis]
