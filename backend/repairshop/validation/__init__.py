# Validation package init
"""
Repair Shop Backend — Validation Layer
=======================================

What:  Declarative per-field rules applied to request bodies before any
       persistence logic runs.
How:   ``rules`` holds the engine (Rule, FieldRules, RuleSet); ``rulesets``
       declares the rules of each write endpoint. A failed RuleSet raises
       ValidationError with every violation, in declaration order.
"""
