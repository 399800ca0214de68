"""
Study 01: The Basic Idea

Three agents, one radius.

Questions to explore:
- How often do A and B find each other?
- Does C ever connect to A? (It should not: 12.73 > 10)
- How long does a link survive once the signals stop?
"""
