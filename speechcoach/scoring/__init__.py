"""
scoring/ - Skill Scoring & Normalization Engine

Modules:
    utils.py            - Decimal utilities
    taxonomy.py         - Skill catalogue and category classification
    ai_response.py      - Raw AI model output parsing
    ai_mapper.py        - AI analysis keys to skill ids, polarity correction
    aggregator.py       - Per-category totals from persisted + fresh AI scores
    normalizer.py       - Final score on the 110-point scale, divider validation
    critical_skills.py  - Strengths / improvements split of coach selections
"""
