from __future__ import annotations

import unittest

from api.engine.card_filters_v1 import (
    VERSION,
    filter_card_level,
    filter_factions,
    filter_permanence,
    filter_required,
    filter_restrictions,
    filter_seal,
    filter_slot,
    filter_tag,
    filter_traits,
    filter_type,
    filter_uses,
)
from api.engine.utils import card_level, card_uses
from tests.access_fixture_harness import make_card, make_investigator


class CardFiltersV1Tests(unittest.TestCase):
    def test_faction_matches_any_of_three_faction_slots(self) -> None:
        self.assertEqual(VERSION, "card_filters_v1")
        dual = make_card("1", faction_code="rogue", faction2_code="survivor")
        triple = make_card("2", faction_code="neutral", faction2_code="guardian", faction3_code="mystic")

        self.assertTrue(filter_factions(["survivor"])(dual))
        self.assertTrue(filter_factions(["mystic"])(triple))
        self.assertFalse(filter_factions(["seeker"])(dual))

    def test_multiclass_is_anded_with_remaining_factions(self) -> None:
        multiclass_rogue = make_card("1", faction_code="rogue", faction2_code="survivor")
        mono_rogue = make_card("2", faction_code="rogue")
        multiclass_seeker = make_card("3", faction_code="seeker", faction2_code="mystic")

        rule = filter_factions(["multiclass", "rogue"])
        self.assertTrue(rule(multiclass_rogue))
        self.assertFalse(rule(mono_rogue))
        self.assertFalse(rule(multiclass_seeker))

        self.assertTrue(filter_factions(["multiclass"])(multiclass_seeker))
        self.assertFalse(filter_factions(["multiclass"])(mono_rogue))

    def test_card_level_prefers_customization_xp(self) -> None:
        self.assertEqual(card_level(make_card("1", xp=3)), 3)
        self.assertEqual(card_level(make_card("2", xp=0, customization_xp=5)), 2)
        self.assertIsNone(card_level(make_card("3")))

    def test_level_range_is_inclusive_and_requires_a_level(self) -> None:
        rule = filter_card_level(0, 2, check_customizable=True)
        self.assertTrue(rule(make_card("1", xp=0)))
        self.assertTrue(rule(make_card("2", xp=2)))
        self.assertFalse(rule(make_card("3", xp=3)))
        self.assertFalse(rule(make_card("4")))

    def test_customizable_cards_pass_unless_range_enforced(self) -> None:
        customizable = make_card("1", xp=0, customization_xp=8, customization_options=[{"xp": 1}])
        self.assertTrue(filter_card_level(0, 0)(customizable))
        self.assertFalse(filter_card_level(0, 0, check_customizable=True)(customizable))
        self.assertTrue(filter_card_level(4, 4, check_customizable=True)(customizable))

    def test_permanence(self) -> None:
        permanent = make_card("1", permanent=True)
        regular = make_card("2")
        self.assertTrue(filter_permanence(True)(permanent))
        self.assertFalse(filter_permanence(True)(regular))
        self.assertTrue(filter_permanence(False)(regular))
        self.assertFalse(filter_permanence(False)(permanent))

    def test_traits_are_whole_words(self) -> None:
        spellbook = make_card("1", real_traits="Item. Spellbook.")
        spell = make_card("2", real_traits="Spell.")
        self.assertFalse(filter_traits(["Spell"])(spellbook))
        self.assertTrue(filter_traits(["Spell"])(spell))
        self.assertTrue(filter_traits(["Tome", "Spell"])(spell))

    def test_traits_from_customization_options(self) -> None:
        card = make_card(
            "1",
            real_traits="Item.",
            customization_options=[{"xp": 1}, {"xp": 2, "real_traits": "Item. Relic."}],
        )
        self.assertTrue(filter_traits(["Relic"], check_customizable_options=True)(card))
        self.assertFalse(filter_traits(["Relic"], check_customizable_options=False)(card))

    def test_tags_direct_and_from_customization_options(self) -> None:
        direct = make_card("1", tags="hh.")
        customizable = make_card("2", customization_options=[{"xp": 1, "tags": ["hh"]}])
        self.assertTrue(filter_tag("hh", False)(direct))
        self.assertFalse(filter_tag("hh", False)(customizable))
        self.assertTrue(filter_tag("hh", True)(customizable))
        self.assertFalse(filter_tag("hd", True)(customizable))

    def test_seal_by_tag_or_text(self) -> None:
        tagged = make_card("1", tags=["se"])
        by_text = make_card("2", real_text="Seal (+1). When this card leaves play, release it.")
        plain = make_card("3", real_text="Draw 1 card.")
        rule = filter_seal(True)
        self.assertTrue(rule(tagged))
        self.assertTrue(rule(by_text))
        self.assertFalse(rule(plain))

    def test_uses_are_parsed_from_first_line(self) -> None:
        charges = make_card("1", real_text="Uses (4 charge).\n[action]: Fight.")
        secrets = make_card("2", real_text="Uses (3 secrets).")
        late = make_card("3", real_text="Fast.\nUses (2 supplies).")

        self.assertEqual(card_uses(charges), "charges")
        self.assertEqual(card_uses(secrets), "secrets")
        self.assertIsNone(card_uses(late))
        self.assertTrue(filter_uses("charges")(charges))
        self.assertFalse(filter_uses("charge")(charges))
        self.assertFalse(filter_uses("supplies")(late))

    def test_type_and_slot(self) -> None:
        card = make_card("1", type_code="asset", real_slot="Hand x2")
        self.assertTrue(filter_type(["asset", "event"])(card))
        self.assertFalse(filter_type(["skill"])(card))
        self.assertTrue(filter_slot("Hand")(card))
        self.assertFalse(filter_slot("Arcane")(card))
        self.assertFalse(filter_slot("Hand")(make_card("2")))

    def test_required_normalizes_parallel_and_duplicates(self) -> None:
        signature = make_card("1", restrictions={"investigator": {"01001": "01001"}})
        unrestricted = make_card("2")
        root = make_investigator("01001", [])
        parallel = make_investigator("90024", [], alternate_of_code="01001")
        reprint = make_investigator("01501", [], duplicate_of_code="01001")
        other = make_investigator("02001", [])

        for investigator in (root, parallel, reprint):
            self.assertTrue(filter_required(investigator)(signature))
        self.assertFalse(filter_required(other)(signature))
        self.assertFalse(filter_required(root)(unrestricted))

    def test_trait_restrictions_compare_lowercase(self) -> None:
        card = make_card("1", restrictions={"trait": ["detective"]})
        detective = make_investigator("1", [], real_traits="Agency. Detective.")
        scholar = make_investigator("2", [], real_traits="Miskatonic.")

        self.assertTrue(filter_restrictions(detective)(card))
        self.assertFalse(filter_restrictions(scholar)(card))
        self.assertTrue(filter_restrictions(scholar)(make_card("3")))


if __name__ == "__main__":
    unittest.main()
