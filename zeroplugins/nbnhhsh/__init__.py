"""Guesses for what pinyin abbreviations stand for."""