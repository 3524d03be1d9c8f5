"""
Matching engine package.

- analyzers: normalizer chain and tokenizers (whitespace, shingles, unique)
- schema: indexed fields and their analyzers
- models: documents, postings, match results
- index: in-memory inverted index, built once
- query: TermSet / Or / DisMax query tree and streaming evaluator
- selector: reservoir-sampling and top-score single-result selection
- engine: query string in, at most one document out
"""
