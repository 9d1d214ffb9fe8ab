"""hextone tone modem: synthesis, FFT, peak detection, nibble mapping."""
