"""
Typed feature identifiers.

Every feature a class, subclass or feat can grant is a FeatureKey member.
Class data and strategy hooks refer to members, so a misspelt key fails at
import time; the RulesDataset additionally checks at load time that every
member has a definition and every definition uses a member.
"""

from enum import Enum


class FeatureKey(str, Enum):
    """Identifier of a grantable feature. Values are what snapshots store."""

    # Shared across classes
    ABILITY_SCORE_IMPROVEMENT = "ability_score_improvement"
    SPELLCASTING = "spellcasting"
    WEAPON_MASTERY = "weapon_mastery"
    FIGHTING_STYLE = "fighting_style"
    EXTRA_ATTACK = "extra_attack"
    EXPERTISE = "expertise"
    EVASION = "evasion"
    CHANNEL_DIVINITY = "channel_divinity"
    LANDS_STRIDE = "lands_stride"

    # Barbarian
    RAGE = "rage"
    BARBARIAN_UNARMORED_DEFENSE = "barbarian_unarmored_defense"
    RECKLESS_ATTACK = "reckless_attack"
    DANGER_SENSE = "danger_sense"
    PRIMAL_PATH = "primal_path"
    PRIMAL_KNOWLEDGE = "primal_knowledge"
    FAST_MOVEMENT = "fast_movement"
    FERAL_INSTINCT = "feral_instinct"
    BRUTAL_CRITICAL = "brutal_critical"
    RELENTLESS_RAGE = "relentless_rage"
    PERSISTENT_RAGE = "persistent_rage"
    INDOMITABLE_MIGHT = "indomitable_might"
    PRIMAL_CHAMPION = "primal_champion"
    BERSERKER_FRENZY = "berserker_frenzy"
    BERSERKER_MINDLESS_RAGE = "berserker_mindless_rage"
    BERSERKER_INTIMIDATING_PRESENCE = "berserker_intimidating_presence"
    BERSERKER_RETALIATION = "berserker_retaliation"
    ZEALOT_DIVINE_FURY = "zealot_divine_fury"
    ZEALOT_WARRIOR_OF_THE_GODS = "zealot_warrior_of_the_gods"
    ZEALOT_FANATICAL_FOCUS = "zealot_fanatical_focus"
    ZEALOT_RAGE_BEYOND_DEATH = "zealot_rage_beyond_death"

    # Bard
    BARDIC_INSPIRATION = "bardic_inspiration"
    JACK_OF_ALL_TRADES = "jack_of_all_trades"
    SONG_OF_REST = "song_of_rest"
    BARD_COLLEGE = "bard_college"
    FONT_OF_INSPIRATION = "font_of_inspiration"
    COUNTERCHARM = "countercharm"
    MAGICAL_SECRETS = "magical_secrets"
    SUPERIOR_INSPIRATION = "superior_inspiration"
    LORE_CUTTING_WORDS = "lore_cutting_words"
    LORE_ADDITIONAL_MAGICAL_SECRETS = "lore_additional_magical_secrets"
    LORE_PEERLESS_SKILL = "lore_peerless_skill"
    VALOR_COMBAT_INSPIRATION = "valor_combat_inspiration"
    VALOR_EXTRA_ATTACK = "valor_extra_attack"
    VALOR_BATTLE_MAGIC = "valor_battle_magic"

    # Cleric
    DIVINE_DOMAIN = "divine_domain"
    DESTROY_UNDEAD = "destroy_undead"
    DIVINE_INTERVENTION = "divine_intervention"
    DISCIPLE_OF_LIFE = "disciple_of_life"
    BLESSED_HEALER = "blessed_healer"
    DIVINE_STRIKE_LIFE = "divine_strike_life"
    SUPREME_HEALING = "supreme_healing"
    WARDING_FLARE = "warding_flare"
    RADIANCE_OF_THE_DAWN = "radiance_of_the_dawn"
    POTENT_SPELLCASTING = "potent_spellcasting"
    CORONA_OF_LIGHT = "corona_of_light"
    WAR_PRIEST = "war_priest"
    GUIDED_STRIKE = "guided_strike"
    DIVINE_STRIKE_WAR = "divine_strike_war"
    AVATAR_OF_BATTLE = "avatar_of_battle"

    # Druid
    DRUIDIC = "druidic"
    WILD_SHAPE = "wild_shape"
    DRUID_CIRCLE = "druid_circle"
    TIMELESS_BODY = "timeless_body"
    ARCHDRUID = "archdruid"
    LAND_NATURAL_RECOVERY = "land_natural_recovery"
    LAND_NATURES_WARD = "land_natures_ward"
    MOON_COMBAT_WILD_SHAPE = "moon_combat_wild_shape"
    MOON_CIRCLE_FORMS = "moon_circle_forms"
    MOON_PRIMAL_STRIKE = "moon_primal_strike"
    MOON_ELEMENTAL_WILD_SHAPE = "moon_elemental_wild_shape"

    # Fighter
    SECOND_WIND = "second_wind"
    ACTION_SURGE = "action_surge"
    MARTIAL_ARCHETYPE = "martial_archetype"
    INDOMITABLE = "indomitable"
    EXTRA_ATTACK_2 = "extra_attack_2"
    EXTRA_ATTACK_3 = "extra_attack_3"
    CHAMPION_IMPROVED_CRITICAL = "champion_improved_critical"
    CHAMPION_REMARKABLE_ATHLETE = "champion_remarkable_athlete"
    CHAMPION_SUPERIOR_CRITICAL = "champion_superior_critical"
    CHAMPION_SURVIVOR = "champion_survivor"
    BATTLE_MASTER_COMBAT_SUPERIORITY = "battle_master_combat_superiority"
    BATTLE_MASTER_STUDENT_OF_WAR = "battle_master_student_of_war"
    BATTLE_MASTER_IMPROVED_COMBAT_SUPERIORITY = "battle_master_improved_combat_superiority"
    BATTLE_MASTER_RELENTLESS = "battle_master_relentless"
    BATTLE_MASTER_ULTIMATE_COMBAT_SUPERIORITY = "battle_master_ultimate_combat_superiority"
    ELDRITCH_KNIGHT_SPELLCASTING = "eldritch_knight_spellcasting"
    ELDRITCH_KNIGHT_WEAPON_BOND = "eldritch_knight_weapon_bond"
    ELDRITCH_KNIGHT_WAR_MAGIC = "eldritch_knight_war_magic"
    ELDRITCH_KNIGHT_ELDRITCH_STRIKE = "eldritch_knight_eldritch_strike"

    # Monk
    MARTIAL_ARTS = "martial_arts"
    MONK_UNARMORED_DEFENSE = "monk_unarmored_defense"
    KI = "ki"
    UNARMORED_MOVEMENT = "unarmored_movement"
    MONASTIC_TRADITION = "monastic_tradition"
    DEFLECT_MISSILES = "deflect_missiles"
    STUNNING_STRIKE = "stunning_strike"
    KI_EMPOWERED_STRIKES = "ki_empowered_strikes"
    DIAMOND_SOUL = "diamond_soul"
    PERFECT_SELF = "perfect_self"
    OPEN_HAND_TECHNIQUE = "open_hand_technique"
    OPEN_HAND_WHOLENESS_OF_BODY = "open_hand_wholeness_of_body"
    OPEN_HAND_QUIVERING_PALM = "open_hand_quivering_palm"
    SHADOW_ARTS = "shadow_arts"
    SHADOW_STEP = "shadow_step"
    SHADOW_OPPORTUNIST = "shadow_opportunist"

    # Paladin
    DIVINE_SENSE = "divine_sense"
    LAY_ON_HANDS = "lay_on_hands"
    DIVINE_SMITE = "divine_smite"
    SACRED_OATH = "sacred_oath"
    AURA_OF_PROTECTION = "aura_of_protection"
    AURA_OF_COURAGE = "aura_of_courage"
    IMPROVED_DIVINE_SMITE = "improved_divine_smite"
    DEVOTION_SACRED_WEAPON = "devotion_sacred_weapon"
    DEVOTION_AURA_OF_DEVOTION = "devotion_aura_of_devotion"
    DEVOTION_HOLY_NIMBUS = "devotion_holy_nimbus"
    VENGEANCE_VOW_OF_ENMITY = "vengeance_vow_of_enmity"
    VENGEANCE_RELENTLESS_AVENGER = "vengeance_relentless_avenger"
    VENGEANCE_AVENGING_ANGEL = "vengeance_avenging_angel"

    # Ranger
    FAVORED_ENEMY = "favored_enemy"
    NATURAL_EXPLORER = "natural_explorer"
    RANGER_ARCHETYPE = "ranger_archetype"
    PRIMEVAL_AWARENESS = "primeval_awareness"
    VANISH = "vanish"
    FERAL_SENSES = "feral_senses"
    FOE_SLAYER = "foe_slayer"
    HUNTER_COLOSSUS_SLAYER = "hunter_colossus_slayer"
    HUNTER_DEFENSIVE_TACTICS = "hunter_defensive_tactics"
    HUNTER_MULTIATTACK = "hunter_multiattack"
    BEAST_MASTER_COMPANION = "beast_master_companion"
    BEAST_MASTER_EXCEPTIONAL_TRAINING = "beast_master_exceptional_training"
    BEAST_MASTER_BESTIAL_FURY = "beast_master_bestial_fury"

    # Rogue
    SNEAK_ATTACK = "sneak_attack"
    THIEVES_CANT = "thieves_cant"
    CUNNING_ACTION = "cunning_action"
    ROGUISH_ARCHETYPE = "roguish_archetype"
    UNCANNY_DODGE = "uncanny_dodge"
    RELIABLE_TALENT = "reliable_talent"
    SLIPPERY_MIND = "slippery_mind"
    STROKE_OF_LUCK = "stroke_of_luck"
    THIEF_FAST_HANDS = "thief_fast_hands"
    THIEF_SUPREME_SNEAK = "thief_supreme_sneak"
    ASSASSIN_ASSASSINATE = "assassin_assassinate"
    ASSASSIN_DEATH_STRIKE = "assassin_death_strike"
    ARCANE_TRICKSTER_SPELLCASTING = "arcane_trickster_spellcasting"
    ARCANE_TRICKSTER_MAGICAL_AMBUSH = "arcane_trickster_magical_ambush"

    # Sorcerer
    FONT_OF_MAGIC = "font_of_magic"
    SORCEROUS_ORIGIN = "sorcerous_origin"
    SORCEROUS_RESTORATION = "sorcerous_restoration"
    METAMAGIC_TWINNED_SPELL = "metamagic_twinned_spell"
    METAMAGIC_QUICKENED_SPELL = "metamagic_quickened_spell"
    METAMAGIC_EMPOWERED_SPELL = "metamagic_empowered_spell"
    METAMAGIC_HEIGHTENED_SPELL = "metamagic_heightened_spell"
    DRACONIC_RESILIENCE = "draconic_resilience"
    ELEMENTAL_AFFINITY = "elemental_affinity"
    DRAGON_WINGS = "dragon_wings"
    DRACONIC_PRESENCE = "draconic_presence"
    WILD_MAGIC_SURGE = "wild_magic_surge"
    TIDES_OF_CHAOS = "tides_of_chaos"
    BEND_LUCK = "bend_luck"
    CONTROLLED_CHAOS = "controlled_chaos"

    # Warlock
    PACT_MAGIC = "pact_magic"
    OTHERWORLDLY_PATRON = "otherworldly_patron"
    PACT_BOON = "pact_boon"
    MYSTIC_ARCANUM = "mystic_arcanum"
    ELDRITCH_MASTER = "eldritch_master"
    INVOCATION_AGONIZING_BLAST = "invocation_agonizing_blast"
    INVOCATION_ARMOR_OF_SHADOWS = "invocation_armor_of_shadows"
    INVOCATION_REPELLING_BLAST = "invocation_repelling_blast"
    INVOCATION_DEVILS_SIGHT = "invocation_devils_sight"
    INVOCATION_ELDRITCH_SPEAR = "invocation_eldritch_spear"
    INVOCATION_MASK_OF_MANY_FACES = "invocation_mask_of_many_faces"
    INVOCATION_MISTY_VISIONS = "invocation_misty_visions"
    INVOCATION_BEAST_SPEECH = "invocation_beast_speech"
    INVOCATION_ONE_WITH_SHADOWS = "invocation_one_with_shadows"
    INVOCATION_ASCENDANT_STEP = "invocation_ascendant_step"
    INVOCATION_WITCH_SIGHT = "invocation_witch_sight"
    FIEND_DARK_ONES_BLESSING = "fiend_dark_ones_blessing"
    FIEND_DARK_ONES_OWN_LUCK = "fiend_dark_ones_own_luck"
    FIEND_HURL_THROUGH_HELL = "fiend_hurl_through_hell"
    ARCHFEY_FEY_PRESENCE = "archfey_fey_presence"
    ARCHFEY_MISTY_ESCAPE = "archfey_misty_escape"
    ARCHFEY_DARK_DELIRIUM = "archfey_dark_delirium"

    # Wizard
    ARCANE_RECOVERY = "arcane_recovery"
    ARCANE_TRADITION = "arcane_tradition"
    SPELL_MASTERY = "spell_mastery"
    SIGNATURE_SPELLS = "signature_spells"
    EVOCATION_SCULPT_SPELLS = "evocation_sculpt_spells"
    EVOCATION_POTENT_CANTRIP = "evocation_potent_cantrip"
    EMPOWERED_EVOCATION = "empowered_evocation"
    EVOCATION_OVERCHANNEL = "evocation_overchannel"
    ARCANE_WARD = "arcane_ward"
    ABJURATION_PROJECTED_WARD = "abjuration_projected_ward"
    ABJURATION_SPELL_RESISTANCE = "abjuration_spell_resistance"

    # Feats
    ALERT = "alert"
    TOUGH = "tough"
    MAGIC_INITIATE = "magic_initiate"
    SKILLED = "skilled"
    SAVAGE_ATTACKER = "savage_attacker"
    TAVERN_BRAWLER = "tavern_brawler"
    LUCKY = "lucky"
    WAR_CASTER = "war_caster"
    GREAT_WEAPON_MASTER = "great_weapon_master"
