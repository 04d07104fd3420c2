import unittest

from caredata.names import is_valid_name


class NameRuleTests(unittest.TestCase):
    def test_accepts_two_words_with_five_letters(self) -> None:
        self.assertTrue(is_valid_name("Jon Li"))

    def test_rejects_fewer_than_five_letters(self) -> None:
        self.assertFalse(is_valid_name("Jo Li"))

    def test_rejects_digits(self) -> None:
        self.assertFalse(is_valid_name("A1 Bc"))
        self.assertFalse(is_valid_name("Johnny Smith2"))

    def test_accepts_apostrophes_and_hyphens(self) -> None:
        self.assertTrue(is_valid_name("O'Brien Lee"))
        self.assertTrue(is_valid_name("Mary-Jane Watson"))

    def test_rejects_other_punctuation(self) -> None:
        self.assertFalse(is_valid_name("Dr. Watson"))
        self.assertFalse(is_valid_name("Smith, John"))

    def test_rejects_single_word(self) -> None:
        self.assertFalse(is_valid_name("Cleopatra"))

    def test_rejects_blank(self) -> None:
        self.assertFalse(is_valid_name(""))
        self.assertFalse(is_valid_name("   "))

    def test_accepts_non_ascii_letters(self) -> None:
        self.assertTrue(is_valid_name("José Álvarez"))

    def test_repeated_spaces_do_not_add_words(self) -> None:
        self.assertFalse(is_valid_name("Madonna   "))
        self.assertTrue(is_valid_name("Anne  Marie"))


if __name__ == "__main__":
    unittest.main()
