"""Loading and picking the Ogura Hyakunin Isshu poems."""