"""Built-in general-knowledge question set used whenever the provider fails."""

from typing import List

from trivia.models import OPTION_LABELS, Option, Question

_RAW = [
    ('Apa ibu kota negara Indonesia saat ini?', ('Bandung', 'Jakarta', 'Surabaya', 'Medan'), 'B'),
    ('Planet manakah yang dikenal sebagai Planet Merah?', ('Venus', 'Jupiter', 'Mars', 'Saturnus'), 'C'),
    ('Berapa hasil dari 7 x 8?', ('54', '56', '58', '64'), 'B'),
    ('Siapa proklamator kemerdekaan Indonesia bersama Soekarno?', ('Mohammad Hatta', 'Sutan Sjahrir', 'Tan Malaka', 'Ki Hajar Dewantara'), 'A'),
    ('Hewan apa yang menjadi lambang negara Indonesia?', ('Harimau', 'Komodo', 'Elang Jawa', 'Garuda'), 'D'),
    ('Gas apa yang paling banyak terdapat di atmosfer bumi?', ('Oksigen', 'Nitrogen', 'Karbon dioksida', 'Hidrogen'), 'B'),
    ('Samudra terluas di dunia adalah?', ('Samudra Hindia', 'Samudra Atlantik', 'Samudra Pasifik', 'Samudra Arktik'), 'C'),
    ('Berapa jumlah provinsi di Pulau Jawa?', ('4', '5', '6', '7'), 'C'),
    ('Alat musik angklung berasal dari daerah?', ('Jawa Barat', 'Bali', 'Sumatera Barat', 'Papua'), 'A'),
    ('Air mendidih pada suhu berapa derajat Celsius di permukaan laut?', ('90', '95', '100', '110'), 'C'),
]


def fallback_questions() -> List[Question]:
    return [
        Question(
            text=text,
            options=tuple(Option(label, option) for label, option in zip(OPTION_LABELS, options)),
            correct_label=answer,
        )
        for text, options, answer in _RAW
    ]
