# -*- coding: utf-8 -*-
APP_NAME = "Outil d'Aide à la Décision BPCO"
APP_VERSION = "1.2.0"
GUIDELINE = "GOLD 2025"
