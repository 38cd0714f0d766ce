"""
examples/basic_solving.py
=========================
Minimal factorkb example: entailment, arithmetic isolation, classification.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from factorkb import KnowledgeBase, PropertyDeclaration


def main():
    kb = KnowledgeBase()

    # Socrates syllogism as propositional implications
    philosopher, human, mortal = kb.symbols("philosopher", "human", "mortal")
    kb.add(philosopher >> human, human >> mortal, philosopher)

    # c = a + b, solved for b
    a, b = kb.symbols("a", "b")
    kb.add((a + b).equals(10), a.equals(4))

    # tom is a cat, every cat has four legs
    tom, cat, legs = kb.symbols("tom", "cat", "legs")
    kb.add(kb.is_a(tom, cat), PropertyDeclaration(kb.is_.relation(cat), legs, 4))

    stats = kb.solve()
    print(kb.render())
    print(stats.summary())

    assert mortal.solved_true, "Should derive: Socrates is mortal"
    assert b.alternate_value.as_number() == 6, "Should isolate b = 6"
    assert tom.has_property(legs, 4), "Tom should inherit four legs"
    assert kb.has_conflict() is None

    (wet,) = kb.given(kb.symbol("rain")).query(kb.symbol("wet"))
    print(f"wet solved without a rule linking it to rain: {wet.solved}")
    print("✓ Basic solving example passed.")


if __name__ == "__main__":
    main()
