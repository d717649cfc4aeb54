"""Built-in boards: default category bank, default teams, placeholders and fallbacks."""
import random
from typing import List, Optional

import config
from models import Category, Question, Team

# title -> five (clue, answer) pairs, easiest first
DEFAULT_CATEGORY_BANK = {
    "Scienza": [
        ("Questo gas costituisce la maggior parte dell'atmosfera terrestre", "Cos'è l'Azoto?"),
        ("Questa è la più piccola unità della materia", "Cos'è un atomo?"),
        ("Questo scienziato ha formulato la teoria della relatività", "Chi è Albert Einstein?"),
        ("Questo elemento ha il numero atomico 79", "Cos'è l'Oro?"),
        ("Questo fisico ha sviluppato il principio di indeterminazione della meccanica quantistica",
         "Chi è Werner Heisenberg?"),
    ],
    "Storia": [
        ("Questa guerra si è svolta tra il 1939 e il 1945", "Cos'è la Seconda Guerra Mondiale?"),
        ('Questo famoso documento inizia con "Noi, il Popolo"', "Cos'è la Costituzione degli Stati Uniti?"),
        ("Questa antica meraviglia fu costruita come tomba per il faraone egizio Cheope",
         "Cos'è la Grande Piramide di Giza?"),
        ("Questo trattato pose fine alla Prima Guerra Mondiale nel 1919", "Cos'è il Trattato di Versailles?"),
        ("Questa antica civiltà costruì Machu Picchu in Perù", "Chi sono gli Inca?"),
    ],
    "Geografia": [
        ("Questo è l'oceano più grande della Terra", "Cos'è l'Oceano Pacifico?"),
        ('Questo paese è conosciuto come "La Terra del Sol Levante"', "Cos'è il Giappone?"),
        ("Questo fiume è il più lungo del mondo", "Cos'è il fiume Nilo?"),
        ("Questa catena montuosa separa l'Europa dall'Asia", "Cosa sono i Monti Urali?"),
        ("Questo paese africano ha il maggior numero di piramidi al mondo", "Cos'è il Sudan?"),
    ],
    "Letteratura": [
        ('Questo autore ha scritto "Romeo e Giulietta"', "Chi è William Shakespeare?"),
        ("Questo romanzo di F. Scott Fitzgerald presenta il personaggio Jay Gatsby", "Cos'è Il Grande Gatsby?"),
        ("Questo autore ha scritto \"Cent'anni di solitudine\"", "Chi è Gabriel García Márquez?"),
        ("Questo poema epico inizia con \"Cantami, o Diva, del Pelìde Achille l'ira funesta\"", "Cos'è l'Iliade?"),
        ('Questo autore russo ha scritto "Delitto e Castigo"', "Chi è Fëdor Dostoevskij?"),
    ],
    "Intrattenimento": [
        ("Questo attore ha interpretato Iron Man nel Marvel Cinematic Universe", "Chi è Robert Downey Jr.?"),
        ("Questo film ha vinto il premio Oscar come miglior film nel 2020", "Cos'è Parasite?"),
        ("Questa serie TV presenta draghi ed è basata sui libri di George R.R. Martin", "Cos'è Il Trono di Spade?"),
        ("Questo artista musicale ha il maggior numero di vittorie ai Grammy di tutti i tempi", "Chi è Beyoncé?"),
        ("Questo regista ha creato sia il franchise di Star Wars che quello di Indiana Jones", "Chi è George Lucas?"),
    ],
    "Musica": [
        ('Questa band britannica ha pubblicato l\'album "The Dark Side of the Moon"', "Chi sono i Pink Floyd?"),
        ("Questo strumento a corda ha tipicamente 6 corde ed è molto usato nel rock", "Cos'è la chitarra elettrica?"),
        ('Questo compositore italiano è famoso per le sue "Quattro Stagioni"', "Chi è Antonio Vivaldi?"),
        ("Questo genere musicale è nato a New Orleans ed è caratterizzato dall'improvvisazione", "Cos'è il Jazz?"),
        ("Questo compositore tedesco ha continuato a comporre anche dopo essere diventato completamente sordo",
         "Chi è Ludwig van Beethoven?"),
    ],
    "Sport": [
        ("Questo sport si gioca su un campo verde rettangolare con 11 giocatori per squadra", "Cos'è il calcio?"),
        ('Questo tennista spagnolo è noto come il "Re della terra rossa"', "Chi è Rafael Nadal?"),
        ("In questo sport olimpico, gli atleti lanciano un disco di metallo", "Cos'è il lancio del disco?"),
        ("Questa competizione ciclistica francese si svolge in 21 tappe", "Cos'è il Tour de France?"),
        ("Questo pugile si è convertito all'Islam e ha cambiato il suo nome da Cassius Clay", "Chi è Muhammad Ali?"),
    ],
    "Arte": [
        ('Questo artista italiano dipinse la "Gioconda"', "Chi è Leonardo da Vinci?"),
        ("Questo stile pittorico, sviluppato in Francia, enfatizza l'impressione visiva del momento",
         "Cos'è l'Impressionismo?"),
        ("Questo architetto spagnolo progettò la Sagrada Familia a Barcellona", "Chi è Antoni Gaudí?"),
        ('Questo artista olandese si tagliò parte di un orecchio e dipinse "Notte stellata"',
         "Chi è Vincent van Gogh?"),
        ("Questa tecnica artistica prevede l'uso di pezzi di carta incollati su una superficie", "Cos'è il collage?"),
    ],
    "Tecnologia": [
        ("Questa azienda ha creato l'iPhone", "Cos'è Apple?"),
        ("Questo linguaggio di programmazione è noto per essere usato nello sviluppo web frontend",
         "Cos'è JavaScript?"),
        ("Questa tecnologia consente la connessione wireless di dispositivi a corto raggio", "Cos'è il Bluetooth?"),
        ('Questo protocollo di rete è alla base di Internet e significa "Transmission Control Protocol/Internet '
         'Protocol"', "Cos'è TCP/IP?"),
        ("Questo algoritmo di consenso è alla base della blockchain di Bitcoin", "Cos'è Proof of Work?"),
    ],
    "Cibo e Cucina": [
        ("Questo formaggio italiano è ingrediente essenziale di una vera pizza margherita", "Cos'è la mozzarella?"),
        ("Questo cereale è l'ingrediente principale del sushi", "Cos'è il riso?"),
        ("Questo frutto tropicale è noto per il suo odore forte e controverso", "Cos'è il durian?"),
        ("Questa tecnica di cottura rapida a fiamma alta è tipica della cucina cinese",
         "Cos'è il saltare in padella (stir-fry)?"),
        ("Questo fungo è uno dei più costosi al mondo e viene cercato con l'aiuto di cani addestrati",
         "Cos'è il tartufo?"),
    ],
}

DEFAULT_TEAMS = [
    ("1", "Squadra 1", "#ef4444"),
    ("2", "Squadra 2", "#3b82f6"),
]

PLACEHOLDERS = {
    "it": {"title": "Nuova Categoria", "text": "Nuova Domanda", "answer": "Nuova Risposta"},
    "en": {"title": "New Category", "text": "New Question", "answer": "New Answer"},
}

FALLBACK_TEMPLATES = {
    "it": {
        "text": "Domanda di esempio per {name} da {points} punti",
        "answer": "Risposta di esempio per {name}",
    },
    "en": {
        "text": "Sample question for {name} worth {points} points",
        "answer": "Sample answer for {name}",
    },
}


def draw_default_categories(rng: Optional[random.Random] = None,
                            count: int = config.NUM_CATEGORIES) -> List[Category]:
    """Draw `count` categories from the bank, each with fresh ids."""
    rng = rng or random
    titles = rng.sample(list(DEFAULT_CATEGORY_BANK), count)
    return [
        Category(
            title=title,
            questions=[
                Question(text=text, answer=answer, points=points)
                for points, (text, answer) in zip(config.POINT_TIERS, DEFAULT_CATEGORY_BANK[title])
            ],
        )
        for title in titles
    ]


def default_teams() -> List[Team]:
    return [Team(id=team_id, name=name, color=color, score=0) for team_id, name, color in DEFAULT_TEAMS]


def placeholder_categories(lang: str = config.DEFAULT_LANGUAGE,
                           count: int = config.NUM_CATEGORIES) -> List[Category]:
    """Blank board for the editor: canonical placeholder strings, one question per tier."""
    texts = PLACEHOLDERS[config.normalize_language(lang)]
    return [
        Category(
            title=texts["title"],
            questions=[
                Question(text=texts["text"], answer=texts["answer"], points=points)
                for points in config.POINT_TIERS
            ],
        )
        for _ in range(count)
    ]


def fallback_questions(name: str, lang: str = config.DEFAULT_LANGUAGE) -> List[dict]:
    """Templated question dicts for one category, in the wire format of /generate-quiz."""
    templates = FALLBACK_TEMPLATES[config.normalize_language(lang)]
    return [
        {
            "points": points,
            "text": templates["text"].format(name=name, points=points),
            "answer": templates["answer"].format(name=name),
        }
        for points in config.POINT_TIERS
    ]


def fallback_category(name: str, lang: str = config.DEFAULT_LANGUAGE) -> Category:
    return Category(
        title=name,
        questions=[
            Question(text=q["text"], answer=q["answer"], points=q["points"], type="exact")
            for q in fallback_questions(name, lang)
        ],
    )
