"""Curated static term tables: built-in aliases and caption mishearings.

Both tables are loaded once at import and never mutated. Keys are written
lowercase here and normalized again when the lookup maps are built, so the
same normalize() applies to table keys and incoming tokens.
"""

from types import MappingProxyType

from termlens.models.terms import Category
from termlens.utils.normalizer import normalize

# ── Built-in aliases ──────────────────────────────
# Colloquial term -> canonical name, grouped by the category of the target.

_BUILTIN_ALIASES_BY_CATEGORY: dict[Category, dict[str, str]] = {
    Category.UNIT: {
        # Space Marines
        "termies": "Terminator Squad",
        "terminators": "Terminator Squad",
        "intercessors": "Intercessor Squad",
        "assault intercessors": "Assault Intercessor Squad",
        "assault terminators": "Assault Terminator Squad",
        "scouts": "Scout Squad",
        "hellblasters": "Hellblaster Squad",
        "devastators": "Devastator Squad",
        "tacticals": "Tactical Squad",
        "assault marines": "Assault Squad",
        "vanguard vets": "Vanguard Veteran Squad",
        "sternguard": "Sternguard Veteran Squad",
        "aggressors": "Aggressor Squad",
        "eradicators": "Eradicator Squad",
        "eliminators": "Eliminator Squad",
        "incursors": "Incursor Squad",
        "infiltrators": "Infiltrator Squad",
        "reivers": "Reiver Squad",
        "suppressors": "Suppressor Squad",
        "inceptors": "Inceptor Squad",
        "bladeguard": "Bladeguard Veteran Squad",
        "las preds": "Predator Destructor",
        "las pred": "Predator Destructor",
        # Drukhari
        "cabalite warriors": "Kabalite Warriors",
        "cabalite": "Kabalite Warriors",
        "cabalites": "Kabalite Warriors",
        "drazar": "Drazhar",
        "mandrekes": "Mandrakes",
        "kronos": "Cronos",
        "lady malice": "Lady Malys",
        "reaver jet bikes": "Reavers",
        "reaver jetbikes": "Reavers",
        "reaver jetbike": "Reavers",
        "reaver jet bike": "Reavers",
        "lilith hesperax": "Lelith Hesperax",
        "lilith": "Lelith Hesperax",
        "lelith": "Lelith Hesperax",
        "scourge with dark lances": "Scourges",
        "scourges with dark lances": "Scourges",
        "scourge with splinter cannons": "Scourges",
        "scourges with splinter cannons": "Scourges",
        "wych": "Wyches",
        "wytches": "Wyches",
        "witches": "Wyches",
        # Genestealer Cults
        "genestealers": "Purestrain Genestealers",
        "genesteelers": "Purestrain Genestealers",
        "genest steelers": "Purestrain Genestealers",
        "ridgerunners": "Achilles Ridgerunners",
        "ridge runners": "Achilles Ridgerunners",
        "rockgrinder": "Goliath Rockgrinder",
        "rock grinder": "Goliath Rockgrinder",
        "kellerorph": "Kelermorph",
        "calamorph": "Kelermorph",
        "sabotur": "Reductus Saboteur",
        "saboteur": "Reductus Saboteur",
        "reducted sabotur": "Reductus Saboteur",
        "aber": "Aberrants",
        # Agents of the Imperium
        "kalidus": "Callidus Assassin",
        "kalidus assassin": "Callidus Assassin",
        "calidus": "Callidus Assassin",
        "calidus assassin": "Callidus Assassin",
        "callidus": "Callidus Assassin",
        "vindicare": "Vindicare Assassin",
        "culexus": "Culexus Assassin",
        "eversor": "Eversor Assassin",
        "castellan crow": "Castellan Crowe",
        "crowe": "Castellan Crowe",
    },
    Category.FACTION: {
        "eldar": "Aeldari",
        "craftworlds": "Aeldari",
        "craftworld": "Aeldari",
        "dark eldar": "Drukhari",
        "sisters of battle": "Adepta Sororitas",
        "sisters": "Adepta Sororitas",
        "admech": "Adeptus Mechanicus",
        "ad mech": "Adeptus Mechanicus",
        "custodes": "Adeptus Custodes",
        "imperial guard": "Astra Militarum",
        "guard": "Astra Militarum",
        "tau": "T'au Empire",
        "tau empire": "T'au Empire",
        "gsc": "Genestealer Cults",
        "genestealer cult": "Genestealer Cults",
        "csm": "Chaos Space Marines",
        "dg": "Death Guard",
        "tsons": "Thousand Sons",
        "nids": "Tyranids",
        "crons": "Necrons",
        "votann": "Leagues of Votann",
    },
    Category.STRATAGEM: {
        "overwatch": "Fire Overwatch",
        "re-roll": "Command Re-roll",
        "reroll": "Command Re-roll",
        "cp reroll": "Command Re-roll",
    },
    Category.DETACHMENT: {
        "cartel": "Kabalite Cartel",
        "cabalite cartel": "Kabalite Cartel",
        "gladius": "Gladius Task Force",
        "montka": "Mont'ka",
    },
}

# ── Phonetic overrides ────────────────────────────
# Canonical name -> ways automatic captioning commonly mishears it, most
# frequent first. Order matters: the first three are the high-confidence ones.

_PHONETIC_OVERRIDES_BY_CATEGORY: dict[Category, dict[str, list[str]]] = {
    Category.UNIT: {
        # Imperium characters
        "Guilliman": [
            "gilman", "gillman", "gillein", "gilaman", "gullan",
            "gullman", "guilleman", "gillaman", "gully man", "gully men",
        ],
        "Roboute Guilliman": [
            "row booty guilliman", "row boot guilliman",
            "roboute gilman", "roboute gillman",
        ],
        "Tigurius": [
            "tigerius", "toarius", "tigarius", "tie garius", "tie gurius", "tig urius",
        ],
        "Sicarius": [
            "sakarius", "ko sakarius", "coe sakarius", "si carius",
            "sic arius", "korsakarius", "kosakarius",
        ],
        "Cato Sicarius": ["cato sakarius"],
        "Helbrecht": [
            "hellbreck", "hellbreick", "hell breck", "hell brecht", "hel brecht", "hell brick",
        ],
        "Chaplain Grimaldus": ["grimaldis", "grim aldus", "grim all dis", "grim oldus"],
        "The Emperor's Champion": ["emperor champion", "emperors champion"],
        # Space Marine units
        "Redemptor Dreadnought": [
            "redemptor dreadnot", "redemptor dread not",
            "redemption dreadnought", "red emptor dreadnought",
        ],
        "Brutalis Dreadnought": [
            "brutalis dreadnot", "brutalis dread not",
            "brutal is dreadnought", "brew talus dreadnought",
        ],
        "Ballistus Dreadnought": [
            "ballistus dreadnot", "ballistas dreadnought", "ball istus dreadnought",
        ],
        "Contemptor Dreadnought": ["contemptor dreadnot", "contempt or dreadnought"],
        "Venerable Dreadnought": ["venerable dreadnot", "venn erable dreadnought"],
        "Sternguard Veterans": [
            "stern guard veterans", "stern guard vets", "sternguard vets", "stern guard",
        ],
        "Vanguard Veterans": ["van guard veterans", "van guard vets"],
        "Assault Terminators": ["assault term in ators", "a salt terminators"],
        "Terminator Squad": ["term in ator squad"],
        "Victrix Honour Guard": [
            "victrix honor guard", "victor's honor guard", "victrix guard",
            "vic tricks honor guard", "vic trix honour guard",
        ],
        "Repulsor Executioner": [
            "repulser executioner", "repulsor executor", "repulse or executioner",
        ],
        "Crusader Squad": ["crew sader squad"],
        "Sword Brethren": ["sword breath ren", "sword brother in"],
        "Intercessors": ["inter cessors", "inter sessors"],
        "Terminators": ["term in ators", "terminator s"],
        "Bladeguard Veterans": ["blade guard veterans", "blade guard vets"],
        # Drukhari
        "Lelith Hesperax": [
            "lilith hesperax", "lil lith hesperax", "lay lith hesperax", "le lith hes per ax",
        ],
        "Drazhar": ["drazar", "draz har", "drash ar", "drash har"],
        "Urien Rakarth": ["urine rakarth", "urine rack arth", "you ren rakarth"],
        "Haemonculus": ["hemo uncle us", "hemo on cue lus", "hee mon cue lus", "he monk you lus"],
        "Archon": ["arc on", "are con", "arc con"],
        "Succubus": ["suck you bus", "suck a bus", "sue cubus"],
        "Kabalite Warriors": [
            "cabal ite warriors", "cab elite warriors", "cabalite warriors", "cable ite warriors",
        ],
        "Wyches": ["witches", "which is", "why chez"],
        "Incubi": ["in cube eye", "ink you bye", "in cue by"],
        "Mandrakes": ["man drakes", "manned rakes"],
        "Scourges": ["scores", "scour ges"],
        "Grotesques": ["grow tesks", "grow tests", "gro tesks"],
        "Wracks": ["rax", "racks", "wrax", "wrecks", "rex", "rack", "wrac"],
        "Talos": ["tail os", "tall os", "tay los"],
        "Cronos": ["crow nos", "kronos", "crone os"],
        "Ravager": ["rav a ger", "rave ager"],
        "Voidraven": ["void raven", "void ray ven"],
        "Razorwing": ["razor wing", "razer wing"],
        "Reaver": ["reever", "reev er", "ree ver"],
        "Hellions": ["helly ons", "hell ions", "helli ons"],
        # Aeldari
        "Farseer": ["far seer", "far see er", "far sear"],
        "Autarch": ["auto arc", "aw tark", "aw tarch", "auto arch"],
        "Warlock": ["war lock", "wore lock"],
        "Avatar of Khaine": ["avatar of cane", "avatar of kane", "avatar of chain"],
        "Yncarne": ["in car nay", "in carne", "ink arne", "yin carne"],
        "Yvraine": ["ee vrain", "eve rain", "e vrain"],
        "Wraithguard": ["wraith guard", "rave guard", "ray guard"],
        "Wraithblades": ["wraith blades", "rave blades", "ray blades"],
        "Wraithknight": ["wraith knight", "rave knight", "ray knight"],
        "Wraithseer": ["wraith seer", "rave seer", "ray seer"],
        "Wave Serpent": ["waive serpent"],
        "Fire Prism": ["fire prison"],
        "Night Spinner": ["knight spinner"],
        "Hemlock Wraithfighter": ["hemlock wraith fighter", "hemlock rave fighter"],
        "Crimson Hunter": ["krimson hunter"],
        "Dire Avengers": ["dyer avengers"],
        "Howling Banshees": ["howling ban shees"],
        "Striking Scorpions": ["striking scorp ions"],
        "Fire Dragons": ["firedragons"],
        "Dark Reapers": ["dark reepers"],
        "Shining Spears": ["shinning spears"],
        "Warp Spiders": ["war spiders"],
        "Swooping Hawks": ["swooping hocks"],
        "Rangers": ["rain gers"],
        "Windriders": ["wind riders", "win drivers"],
        "Guardians": ["guard ians", "guard ee ans"],
        # Necrons
        "Cryptek": ["crypt ek", "crypt tech", "crip tech"],
        "Overlord": ["over lord"],
        "C'tan": ["sea tan", "see tan", "kuh tan", "stan"],
        "Szarekh": ["zara eck", "sah reck", "zah wreck"],
        "Imotekh": ["im oh tech", "ee mo tech", "i moe tech"],
        "Lychguard": ["lick guard", "litch guard", "lych guard", "like guard"],
        "Immortals": ["imm ortals", "im mortals"],
        "Deathmarks": ["death marks", "deaf marks"],
        "Flayed Ones": ["played ones", "frayed ones"],
        "Ophydian Destroyers": [
            "oh fidian destroyers", "offidian destroyers", "o phidian destroyers",
        ],
        "Skorpekh Destroyers": [
            "score peck destroyers", "scor peck destroyers", "score pec destroyers",
        ],
        "Lokhust Destroyers": ["low cust destroyers", "lo cust destroyers", "locust destroyers"],
        "Canoptek Wraiths": ["cane op tech wraiths", "can op tek wraiths", "canop tech wraiths"],
        "Canoptek Scarabs": ["cane op tech scarabs", "can op tek scarabs", "canop tech scarabs"],
        "Canoptek Spyders": ["cane op tech spiders", "can op tek spiders", "canop tech spiders"],
        "Tesseract Vault": ["tesser act vault", "test erect vault", "tess eract vault"],
        "Monolith": ["mono lith", "mano lith"],
        "Doomsday Ark": ["dooms day arc", "doom stay ark"],
        "Ghost Ark": ["ghost arc"],
        "Night Scythe": ["night sigh", "knight scythe"],
        "Doom Scythe": ["doom sigh"],
    },
    Category.FACTION: {
        "Necrons": [
            "neck runs", "necro arms", "neck rons", "necro ns",
            "neck ron", "necro on", "necro ons",
        ],
        "Drukhari": [
            "drew car ee", "drug harry", "dru kari", "drew kari", "drew carry",
            "drug carry", "drook ari", "droo kari", "droo carry",
        ],
        "Aeldari": [
            "el dari", "elder eye", "all dary", "el dary",
            "all dari", "elder i", "al dari", "ale dari",
        ],
        "T'au Empire": ["tao empire", "towel empire", "tow empire"],
        "T'au": ["tao", "towel", "tow"],
        "Adeptus Custodes": [
            "a depth us custodies", "adept us custodies", "adept us cuss toad es",
        ],
        "Adeptus Mechanicus": [
            "a depth us mechanicus", "adept us mechanicus", "adept us mech anicus",
        ],
        "Adepta Sororitas": [
            "a depth a sororitas", "adept a sore or itas", "a depth a sor or itas",
        ],
        "Tyranids": ["tie ran ids", "tier anids", "tyrann ids", "tie rannids"],
        "Genestealer Cults": ["jean steeler cults", "gene steeler cults", "jeans teeler cults"],
        "Leagues of Votann": ["leagues of vote ann", "leagues of vo tan", "leagues of vo tann"],
    },
    Category.KEYWORD: {
        "Dreadnought": ["dreadnot", "dread not", "dread naught", "dred nought", "dread naut"],
        "Primarch": ["prime ark", "pry mark", "prim ark"],
        "Chapter Master": ["chapter mas ter"],
    },
    Category.DETACHMENT: {
        "Realspace Raiders": ["real space raiders", "reel space raiders"],
        "Skysplinter Assault": ["sky splinter assault", "sky splinter a salt"],
        "Kabalite Cartel": ["cabalite cartel", "cab elite cartel", "cable ite cartel"],
        "Hypercrypt Legion": ["hyper crypt legion", "hyper cripted legion"],
        "Awakened Dynasty": ["a wakened dynasty", "awaken dynasty"],
        "Canoptek Court": ["cane op tech court", "can op tek court"],
        "Annihilation Legion": ["an i high lay shun legion", "a nile ation legion"],
        "Wrathful Procession": ["wrath full procession", "wrathful pro session"],
        "Righteous Crusaders": ["right eous crusaders"],
    },
    Category.STRATAGEM: {
        "Fire Overwatch": ["fire over watch", "fire over wach"],
        "Heroic Intervention": ["heroic inter vention"],
        "Insane Bravery": ["in sane bravery", "insane brave ry"],
        "Rapid Ingress": ["rapid in gress"],
        "Lightning-Fast Reactions": ["light ning fast reactions"],
        "Fire and Fade": ["fire in fade"],
        "Forewarned": ["for warned", "four warned"],
        "Phantasm": ["fan tasm", "phantom"],
        "Strands of Fate": ["strand of fate"],
        "Battle Focus": ["battle focas"],
    },
}


# ── Read-only lookup maps ─────────────────────────


def _build_builtin_aliases() -> dict[str, tuple[str, Category]]:
    table: dict[str, tuple[str, Category]] = {}
    for category, aliases in _BUILTIN_ALIASES_BY_CATEGORY.items():
        for alias, canonical in aliases.items():
            table.setdefault(normalize(alias), (canonical, category))
    return table


def _build_phonetic_index() -> dict[str, tuple[str, Category, int]]:
    """Reverse index: normalized variant -> (canonical, category, position).

    The first occurrence of a variant wins, both across canonical names
    (table order) and within one canonical's list.
    """
    index: dict[str, tuple[str, Category, int]] = {}
    for category, overrides in _PHONETIC_OVERRIDES_BY_CATEGORY.items():
        for canonical, variants in overrides.items():
            for position, variant in enumerate(variants):
                index.setdefault(normalize(variant), (canonical, category, position))
    return index


BUILTIN_ALIASES = MappingProxyType(_build_builtin_aliases())

PHONETIC_OVERRIDES = MappingProxyType({
    canonical: tuple(variants)
    for overrides in _PHONETIC_OVERRIDES_BY_CATEGORY.values()
    for canonical, variants in overrides.items()
})

PHONETIC_INDEX = MappingProxyType(_build_phonetic_index())
