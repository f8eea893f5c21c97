"""
Instructions sent to the remote vision models.

STANDARD_OCR_PROMPT is the default for every remote backend. PLAIN_TEXT_PROMPT
skips the LaTeX conversion and is meant to be passed as a custom prompt.
"""

STANDARD_OCR_PROMPT = """Extract all text from this image accurately. If the image contains mathematical formulas, convert them to LaTeX code.

Requirements:
1. Preserve the original layout and line breaks
2. Support Chinese (Simplified/Traditional), English, and mixed text
3. Maintain formatting (spaces, indentation, tables if present)
4. IMPORTANT: Use appropriate punctuation based on the language:
   - For Chinese text: Use Chinese punctuation marks (。，、；：？！)
   - For English text: Use English punctuation marks (.,;:?!)
   - For mixed Chinese-English text: Use Chinese punctuation for Chinese sentences and English punctuation for English sentences

5. **Mathematical Formulas Handling**:
   - If you detect mathematical expressions, equations, or formulas, convert them to LaTeX
   - For inline formulas: wrap with $...$
   - For display/block formulas: wrap with $$...$$
   - Use standard LaTeX syntax: \\frac{}{}, \\sqrt{}, \\int, \\sum, etc.
   - Preserve formula structure and positioning within the text

6. Return ONLY the extracted text (with LaTeX for formulas) without any explanation or additional content
7. If no text is found, return an empty response

Please extract the text now:"""

PLAIN_TEXT_PROMPT = """Extract all text from this image accurately.

Requirements:
1. Preserve the original layout and line breaks
2. Support Chinese (Simplified/Traditional), English, and mixed text
3. Maintain formatting (spaces, indentation, tables if present)
4. Use the punctuation that matches the language of each sentence
5. Return ONLY the extracted text without any explanation or additional content
6. If no text is found, return an empty response

Please extract the text now:"""
