"""
CASA (CSOAI-Authorised Safety Assessment) certification core.

This package defines:
- Static, versioned scoring tables (sector/risk multipliers, tiers, gap catalogue)
- Two domain-scoring strategies (parametric and keyword) on a shared 0..20 scale
- Gap identification, remediation planning, timeline and cost estimation
- Byzantine Council simulation (weighted random voting, 2/3 supermajority)
- Certification roadmaps, audit checklists and quick triage scoring
- A service boundary that validates input and returns typed results
"""
