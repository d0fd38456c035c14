def fake_hash_func(data):
    '''Hash a key made of decimal digits to the integer it spells, so that
    tests control the key hashes.'''
    return int(data)
