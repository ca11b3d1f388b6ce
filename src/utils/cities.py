"""Cities served by the marketplace (area code 77, south-west Bahia)."""

DDD77_CITIES: list[str] = [
    "Abaíra",
    "Anagé",
    "Angical",
    "Baianópolis",
    "Barra",
    "Barra da Estiva",
    "Barra do Choça",
    "Barreiras",
    "Belo Campo",
    "Boa Nova",
    "Bom Jesus da Lapa",
    "Boquira",
    "Botuporã",
    "Brejolândia",
    "Brumado",
    "Buritirama",
    "Caculé",
    "Caetité",
    "Candiba",
    "Canápolis",
    "Caturama",
    "Catolândia",
    "Cocos",
    "Condeúba",
    "Cordeiros",
    "Coribe",
    "Correntina",
    "Cotegipe",
    "Cristópolis",
    "Dom Basílio",
    "Encruzilhada",
    "Érico Cardoso",
    "Formosa do Rio Preto",
    "Guajeru",
    "Guanambi",
    "Ibiassucê",
    "Ibicoara",
    "Ibipitanga",
    "Ibotirama",
    "Igaporã",
    "Iuiú",
    "Jaborandi",
    "Jacaraci",
    "Jussiape",
    "Lagoa Real",
    "Licínio de Almeida",
    "Livramento de Nossa Senhora",
    "Luís Eduardo Magalhães",
    "Macaúbas",
    "Malhada",
    "Malhada de Pedras",
    "Mansidão",
    "Matina",
    "Mirante",
    "Mortugaba",
    "Muquém do São Francisco",
    "Oliveira dos Brejinhos",
    "Palmas de Monte Alto",
    "Paramirim",
    "Piatã",
    "Pindaí",
    "Poções",
    "Presidente Jânio Quadros",
    "Riachão das Neves",
    "Riacho de Santana",
    "Rio de Contas",
    "Rio do Antônio",
    "Rio do Pires",
    "Santa Maria da Vitória",
    "Santa Rita de Cássia",
    "Santana",
    "São Desidério",
    "São Félix do Coribe",
    "Sebastião Laranjeiras",
    "Serra do Ramalho",
    "Serra Dourada",
    "Sítio do Mato",
    "Tabocas do Brejo Velho",
    "Tanhaçu",
    "Tanque Novo",
    "Tremedal",
    "Urandi",
    "Vitória da Conquista",
    "Wanderley",
]
